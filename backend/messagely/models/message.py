from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from messagely.core.database import Base


class Message(Base):
    """
    Private message between two users.

    read_at is set once, by the recipient, and never cleared afterwards.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    # Both ends must reference existing users
    from_username = Column(String, ForeignKey("users.username"), nullable=False, index=True)
    to_username = Column(String, ForeignKey("users.username"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    from_user = relationship("User", foreign_keys=[from_username], backref="sent_messages")
    to_user = relationship("User", foreign_keys=[to_username], backref="received_messages")
