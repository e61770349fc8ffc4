import logging
from typing import List, Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from messagely.core.database import store_errors
from messagely.core.errors import ErrorKind, ServiceError, user_not_found
from messagely.core.security import password_hasher
from messagely.models.user import User
from messagely.models.message import Message
from messagely.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class UserService:
    """Registration, authentication and per-user message listings"""

    @staticmethod
    def register(
        db: Session,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str
    ) -> User:
        """
        Register a new user and return the stored record.

        Raises DUPLICATE_USER if the username is taken. The explicit lookup
        gives a clear error in the common case; the IntegrityError branch
        covers two registrations racing for the same username.
        """
        with store_errors(db):
            existing = db.query(User).filter(User.username == username).first()
            if existing:
                raise ServiceError(ErrorKind.DUPLICATE_USER, f"Username already registered: {username}")

            user = User(
                username=username,
                password_hash=password_hasher.hash(password),
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                join_at=utcnow(),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ServiceError(ErrorKind.DUPLICATE_USER, f"Username already registered: {username}") from e
            db.refresh(user)

        logger.info(f"Registered user {username}")
        return user

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> bool:
        """Is username/password valid? Unknown users are simply False."""
        with store_errors(db):
            row = db.query(User.password_hash).filter(User.username == username).first()
        return row is not None and password_hasher.verify(password, row.password_hash)

    @staticmethod
    def record_login(db: Session, username: str) -> None:
        """Update last_login_at; should only follow a successful authenticate"""
        with store_errors(db):
            updated = db.query(User).filter(User.username == username).update(
                {User.last_login_at: utcnow()}, synchronize_session="fetch"
            )
            if updated == 0:
                db.rollback()
                raise user_not_found(username)
            db.commit()
        logger.info(f"Login: {username}")

    @staticmethod
    def get(db: Session, username: str) -> User:
        with store_errors(db):
            user = db.query(User).filter(User.username == username).first()
        if user is None:
            raise user_not_found(username)
        return user

    @staticmethod
    def all(db: Session) -> List[User]:
        """Basic info on all users, ordered by last then first name"""
        with store_errors(db):
            return db.query(User).order_by(User.last_name, User.first_name).all()

    @staticmethod
    def messages_from(db: Session, username: str) -> List[Dict[str, Any]]:
        """
        Messages sent by this user.

        [{id, to_user, body, sent_at, read_at}] where to_user is the
        recipient's public profile {username, first_name, last_name, phone}.
        """
        with store_errors(db):
            messages = (
                db.query(Message)
                .options(joinedload(Message.to_user))
                .filter(Message.from_username == username)
                .order_by(Message.sent_at, Message.id)
                .all()
            )
        return [
            {
                "id": m.id,
                "to_user": m.to_user.public_profile(),
                "body": m.body,
                "sent_at": m.sent_at,
                "read_at": m.read_at,
            }
            for m in messages
        ]

    @staticmethod
    def messages_to(db: Session, username: str) -> List[Dict[str, Any]]:
        """Messages received by this user, with the sender's public profile as from_user"""
        with store_errors(db):
            messages = (
                db.query(Message)
                .options(joinedload(Message.from_user))
                .filter(Message.to_username == username)
                .order_by(Message.sent_at, Message.id)
                .all()
            )
        return [
            {
                "id": m.id,
                "from_user": m.from_user.public_profile(),
                "body": m.body,
                "sent_at": m.sent_at,
                "read_at": m.read_at,
            }
            for m in messages
        ]


user_service = UserService()
