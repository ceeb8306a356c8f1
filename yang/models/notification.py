"""In-app notification model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from yang.database import Base
from yang.models.mixins import TimestampMixin


class Notification(Base, TimestampMixin):
    """Notification delivered to a recipient about something an actor did."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # 'like', 'comment', 'follow', ...
    target_type = Column(String(50), nullable=False)  # 'post', 'comment', 'user'
    target_id = Column(Integer, nullable=True)
    content = Column(Text, nullable=False, default="")
    is_read = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    actor = relationship("User", foreign_keys=[actor_id])
