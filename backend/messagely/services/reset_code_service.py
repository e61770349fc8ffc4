"""
One-time password reset codes.

Per user: no code -> code issued -> verified -> consumed, or superseded when a
newer code overwrites the stored hash. Codes carry their generation time but
no expiry is enforced, and consuming a code does not clear it: it stays
verifiable until the next issue_reset_code call replaces it.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.orm import Session
from messagely.core.database import store_errors
from messagely.core.errors import user_not_found
from messagely.core.security import password_hasher
from messagely.models.user import User
from messagely.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

RESET_CODE_MIN = 100000
RESET_CODE_MAX = 999999


@dataclass(frozen=True)
class IssuedResetCode:
    """Plaintext code handed to the notifier; only its hash is stored"""
    username: str
    phone: str
    code: str
    generated_at: datetime


def generate_reset_code() -> str:
    """Six-digit code, uniform over [100000, 999999]"""
    return str(RESET_CODE_MIN + secrets.randbelow(RESET_CODE_MAX - RESET_CODE_MIN + 1))


class ResetCodeService:

    @staticmethod
    def issue_reset_code(db: Session, username: str) -> IssuedResetCode:
        """
        Generate a code, store its hash with the generation time and return
        the plaintext. Any previous code for the user is overwritten.
        Concurrent calls for one user are not coordinated: last write wins.
        """
        code = generate_reset_code()
        generated_at = utcnow()
        with store_errors(db):
            user = db.query(User).filter(User.username == username).first()
            if user is None:
                raise user_not_found(username)
            user.reset_code_hash = password_hasher.hash(code)
            user.reset_code_generated_at = generated_at
            phone = user.phone
            db.commit()

        logger.info(f"Issued password reset code for {username}")
        return IssuedResetCode(username=username, phone=phone, code=code, generated_at=generated_at)

    @staticmethod
    def verify_reset_code(db: Session, username: str, candidate_code: str) -> bool:
        """False when the user is unknown or has no active code"""
        with store_errors(db):
            row = db.query(User.reset_code_hash).filter(User.username == username).first()
        return row is not None and password_hasher.verify(candidate_code, row.reset_code_hash)

    @staticmethod
    def consume_reset_code(db: Session, username: str, new_password: str) -> None:
        """
        Store new_password for the user.

        Callers must have verified the code first; this does not re-verify.
        """
        password_hash = password_hasher.hash(new_password)
        with store_errors(db):
            updated = db.query(User).filter(User.username == username).update(
                {User.password_hash: password_hash}, synchronize_session="fetch"
            )
            if updated == 0:
                db.rollback()
                raise user_not_found(username)
            db.commit()
        logger.info(f"Password updated via reset code for {username}")


reset_code_service = ResetCodeService()
