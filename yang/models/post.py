"""Post and post like models."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint

from yang.database import Base
from yang.models.mixins import TimestampMixin


class Post(Base, TimestampMixin):
    """A feed post owned by a user."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)


class PostLike(Base, TimestampMixin):
    """A user's like on a post."""

    __tablename__ = "post_likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_like_user"),)

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
