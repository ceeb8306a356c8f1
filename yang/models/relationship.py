"""Follow and friend relationship models."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from yang.database import Base
from yang.models.mixins import TimestampMixin


class Follow(Base, TimestampMixin):
    """Directed follow edge between two users."""

    __tablename__ = "follows"
    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),)

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)


class Friend(Base, TimestampMixin):
    """Friend link between two users."""

    __tablename__ = "friends"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    friend_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default="accepted")  # 'pending', 'accepted'
