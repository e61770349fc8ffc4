import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from messagely.core.config import settings
from messagely.core.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs) -> Engine:
    """
    Create a database engine for the given URL.

    SQLite connections get check_same_thread disabled (FastAPI runs sync
    dependencies in a threadpool) and foreign keys switched on, so that
    message sender/recipient references are enforced like on PostgreSQL.
    """
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, **kwargs)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Create database engine - manages connection pool
engine = build_engine(settings.DATABASE_URL)

# Session factory - each request gets a new session
# autocommit=False: changes require explicit commit
# autoflush=False: don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes (via finally block),
    even if the route raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session):
    """
    Wrap persistence faults as STORE_UNAVAILABLE.

    Rolls back the session so it stays usable, then raises ServiceError.
    No retry: a single store call either succeeds or the operation fails.
    ServiceErrors raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store failure: {e.__class__.__name__}: {e}")
        raise ServiceError(ErrorKind.STORE_UNAVAILABLE, "Database error occurred") from e
