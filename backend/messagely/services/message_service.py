import logging
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from messagely.core.database import store_errors
from messagely.core.errors import ErrorKind, ServiceError, user_not_found, message_not_found
from messagely.models.message import Message
from messagely.models.user import User
from messagely.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

# Ids are store-assigned BIGINT-range integers; anything outside cannot exist
MAX_MESSAGE_ID = 2**63 - 1


class MessageService:
    """
    Two-party access rules for private messages.

    Only the sender and the recipient may view a message; only the recipient
    may mark it read, and read_at is written at most once.
    """

    @staticmethod
    def send(db: Session, from_username: str, to_username: str, body: str) -> Message:
        with store_errors(db):
            for username in (from_username, to_username):
                if db.query(User.username).filter(User.username == username).first() is None:
                    raise user_not_found(username)

            message = Message(
                from_username=from_username,
                to_username=to_username,
                body=body,
                sent_at=utcnow(),
            )
            db.add(message)
            try:
                db.commit()
            except IntegrityError as e:
                # A user vanished between the lookup and the insert
                db.rollback()
                raise ServiceError(ErrorKind.USER_NOT_FOUND, "Sender or recipient does not exist") from e
            db.refresh(message)

        logger.info(f"Message {message.id} sent from {from_username} to {to_username}")
        return message

    @staticmethod
    def _get(db: Session, message_id: int) -> Message:
        if not 1 <= message_id <= MAX_MESSAGE_ID:
            raise message_not_found(message_id)
        with store_errors(db):
            message = db.query(Message).filter(Message.id == message_id).first()
        if message is None:
            raise message_not_found(message_id)
        return message

    @staticmethod
    def view(db: Session, message_id: int, requesting_username: str) -> Message:
        message = MessageService._get(db, message_id)
        if requesting_username not in (message.from_username, message.to_username):
            raise ServiceError(ErrorKind.FORBIDDEN, "Must have sent or received this message")
        return message

    @staticmethod
    def mark_read(db: Session, message_id: int, requesting_username: str) -> Message:
        """Set read_at once; repeated calls return the first read_at"""
        message = MessageService._get(db, message_id)
        if requesting_username != message.to_username:
            raise ServiceError(ErrorKind.FORBIDDEN, f"Cannot mark message as read: {message_id}")

        if message.read_at is None:
            # Conditional write: a concurrent mark that landed first is kept
            with store_errors(db):
                updated = (
                    db.query(Message)
                    .filter(Message.id == message_id, Message.read_at.is_(None))
                    .update({Message.read_at: utcnow()}, synchronize_session=False)
                )
                db.commit()
                db.refresh(message)
            if updated:
                logger.info(f"Message {message_id} read by {requesting_username}")
        return message

    @staticmethod
    def detail(message: Message) -> Dict[str, Any]:
        """Message with both parties' public profiles"""
        return {
            "id": message.id,
            "body": message.body,
            "sent_at": message.sent_at,
            "read_at": message.read_at,
            "from_user": message.from_user.public_profile(),
            "to_user": message.to_user.public_profile(),
        }


message_service = MessageService()
