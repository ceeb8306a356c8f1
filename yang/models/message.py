"""Direct message models."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text

from yang.database import Base
from yang.models.mixins import TimestampMixin


class Conversation(Base, TimestampMixin):
    """A two-party direct message thread."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    user1_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user2_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)


class Message(Base, TimestampMixin):
    """A message sent inside a conversation."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
