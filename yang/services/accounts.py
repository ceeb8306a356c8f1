"""Account lifecycle: signup, login, id lookup and cascading deletion."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from yang.exceptions import (
    AuthenticationRequired,
    Conflict,
    NotFound,
    StorageError,
    ValidationFailed,
)
from yang.models import (
    Comment,
    CommentReaction,
    CommentReply,
    Conversation,
    CredentialToken,
    Follow,
    Friend,
    Inquiry,
    Message,
    Notification,
    Post,
    PostLike,
    User,
)
from yang.services.auth import (
    get_password_hash,
    get_user,
    get_user_by_email,
    get_user_by_username,
    normalize_email,
    verify_password,
)

logger = logging.getLogger(__name__)


def cascade_steps(user_id: int) -> list[tuple[str, type, object]]:
    """Rows to purge before a user row can go, in foreign key dependency order.

    Content hanging off deleted posts, comments and conversations that was
    written by other users is removed by the ``ON DELETE CASCADE`` keys.
    """
    return [
        ("comment reactions", CommentReaction, CommentReaction.user_id == user_id),
        ("post likes", PostLike, PostLike.user_id == user_id),
        ("comment replies", CommentReply, CommentReply.user_id == user_id),
        ("comments", Comment, Comment.user_id == user_id),
        ("posts", Post, Post.user_id == user_id),
        (
            "follows",
            Follow,
            or_(Follow.follower_id == user_id, Follow.following_id == user_id),
        ),
        (
            "friends",
            Friend,
            or_(Friend.user_id == user_id, Friend.friend_id == user_id),
        ),
        ("messages", Message, Message.sender_id == user_id),
        (
            "conversations",
            Conversation,
            or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id),
        ),
        ("credential tokens", CredentialToken, CredentialToken.user_id == user_id),
        ("inquiries", Inquiry, Inquiry.user_id == user_id),
        ("received notifications", Notification, Notification.recipient_id == user_id),
        ("sent notifications", Notification, Notification.actor_id == user_id),
    ]


class AccountService:
    """Service for account-level operations."""

    def __init__(self, db: Session):
        self.db = db

    def signup(self, email: str, username: str, password: str, confirm_password: str) -> User:
        """Create a new user."""
        email = normalize_email(email)
        username = username.strip()
        if not email or not username or not password or not confirm_password:
            raise ValidationFailed("All fields are required.")
        if password != confirm_password:
            raise ValidationFailed("The passwords do not match.")

        if get_user_by_email(self.db, email):
            raise Conflict("This email is already registered.")
        if get_user_by_username(self.db, username):
            raise Conflict("This username is already taken.")

        user = User(email=email, username=username, password_hash=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent signup with the same email or username
            self.db.rollback()
            raise Conflict("This email or username is already registered.") from e
        self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Authenticate a user by email and password."""
        user = get_user_by_email(self.db, email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationRequired("Incorrect email or password.")
        return user

    def find_username(self, email: str) -> str:
        """Look up the username registered with an email."""
        email = normalize_email(email)
        if not email:
            raise ValidationFailed("Please enter your email address.")
        user = get_user_by_email(self.db, email)
        if not user:
            raise NotFound("No account is registered with this email.")
        return user.username

    def delete_account(self, user_id: int) -> None:
        """Delete a user and everything they own.

        Each cleanup step runs in its own savepoint: a failing step is logged
        and skipped. Deleting the user row is the primary step; if it fails
        the whole transaction is rolled back and StorageError is raised.
        """
        user = get_user(self.db, user_id)
        if not user:
            raise NotFound("User information could not be found.")

        for label, model, criterion in cascade_steps(user_id):
            try:
                with self.db.begin_nested():
                    deleted = (
                        self.db.query(model).filter(criterion).delete(synchronize_session=False)
                    )
            except SQLAlchemyError as e:
                logger.warning(f"Account {user_id}: failed to delete {label}: {e}")
                continue
            if deleted:
                logger.info(f"Account {user_id}: deleted {deleted} {label}")

        try:
            self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Account deletion error for user {user_id}: {e}")
            raise StorageError("The account could not be deleted.") from e

        logger.info(f"Deleted account {user_id}")
