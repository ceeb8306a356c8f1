"""SQLAlchemy models."""

from yang.models.comment import Comment, CommentReaction, CommentReply
from yang.models.credential_token import CredentialToken
from yang.models.inquiry import Inquiry
from yang.models.message import Conversation, Message
from yang.models.notification import Notification
from yang.models.post import Post, PostLike
from yang.models.relationship import Follow, Friend
from yang.models.user import User

__all__ = [
    "User",
    "CredentialToken",
    "Post",
    "PostLike",
    "Comment",
    "CommentReply",
    "CommentReaction",
    "Follow",
    "Friend",
    "Conversation",
    "Message",
    "Inquiry",
    "Notification",
]
