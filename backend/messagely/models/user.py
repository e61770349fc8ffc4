from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from messagely.core.database import Base


class User(Base):
    """
    User of the site.

    Stores credentials, profile information and the current password reset
    code. Passwords and reset codes are stored as bcrypt hashes, never plaintext.
    """
    __tablename__ = "users"

    # Username is the primary key - messages reference it directly
    username = Column(String, primary_key=True)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    join_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    # Set together on reset-code generation; a new code overwrites the old one
    reset_code_hash = Column(String, nullable=True)
    reset_code_generated_at = Column(DateTime(timezone=True), nullable=True)

    def public_profile(self) -> dict:
        return {
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
        }
