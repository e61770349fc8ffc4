import os

# Settings are read at import time, so configure before importing messagely
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_WORK_FACTOR"] = "4"
os.environ["TWILIO_ACCOUNT_SID"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from messagely.core.database import Base, build_engine, get_db
from messagely.main import app
from messagely.services.notifier import SmsNotifier, get_notifier
from messagely.services.user_service import user_service

# One shared in-memory database for the whole test process
test_engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def tables():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory(tables):
    return TestingSessionLocal


@pytest.fixture
def db(tables):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register_user(db):
    def _register(username, password="secret", first_name=None, last_name="Test", phone="+15550000000"):
        return user_service.register(
            db,
            username=username,
            password=password,
            first_name=first_name or username.title(),
            last_name=last_name,
            phone=phone,
        )
    return _register


class RecordingNotifier(SmsNotifier):
    """Notifier that records deliveries instead of calling Twilio"""

    def __init__(self, succeed=True):
        super().__init__(account_sid="AC-test", auth_token="token", from_number="+15551112222")
        self.succeed = succeed
        self.sent = []

    def send(self, code, phone):
        self.sent.append((code, phone))
        return self.succeed


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(tables, notifier):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()
