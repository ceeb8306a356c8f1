"""Password reset and password change workflows."""

import logging
import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yang.config import Settings, get_settings
from yang.exceptions import (
    MailDeliveryError,
    NotFound,
    StorageError,
    TokenExpired,
    TokenNotFound,
    ValidationFailed,
)
from yang.models.credential_token import CredentialToken
from yang.models.enums import TokenPurpose
from yang.models.mixins import utc_now
from yang.models.user import User
from yang.services.auth import (
    get_password_hash,
    get_user,
    get_user_by_email,
    normalize_email,
    verify_password,
)
from yang.services.mailer import (
    Mailer,
    change_code_message,
    password_changed_message,
    reset_link_message,
)
from yang.services.tokens import TokenIssuer, TokenStore, TokenValidator

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

USER_NOT_FOUND = "User information could not be found."


class CredentialService:
    """Credential rotation: forgot-password reset, code-verified change and plain change.

    Every successful rotation consumes the presented token (if any) through a
    conditional update, stores the new hash and marks all other outstanding
    tokens of the user as used, in a single commit.
    """

    def __init__(self, db: Session, mailer: Mailer, settings: Settings | None = None):
        self.db = db
        self.mailer = mailer
        self.settings = settings or get_settings()
        self.issuer = TokenIssuer(db, self.settings)
        self.validator = TokenValidator(db)
        self.store = TokenStore(db)

    # Forgot-password path

    def build_reset_url(self, secret: str) -> str:
        return f"{self.settings.app_base_url.rstrip('/')}/reset-password/{secret}"

    def request_reset(self, email: str) -> str | None:
        """Issue a reset token and mail the link if the email belongs to an account.

        Returns the reset URL, or None when no account matched. Callers answer
        both cases with the same message.
        """
        user = get_user_by_email(self.db, email)
        if not user:
            logger.info("Password reset requested for an unknown email")
            return None

        issued = self.issuer.issue(user.id, TokenPurpose.RESET)
        reset_url = self.build_reset_url(issued.secret)
        subject, html = reset_link_message(
            self.settings, reset_url, self.settings.password_reset_token_ttl_minutes
        )
        self.mailer.send(user.email, subject, html)
        logger.info(f"Password reset mail sent for user {user.id}")
        return reset_url

    def check_reset_token(self, token: str) -> None:
        """Raise TokenNotFound or TokenExpired unless the reset token is active."""
        self.validator.validate(token, TokenPurpose.RESET)

    def confirm_reset(self, token: str, password: str, confirm_password: str) -> None:
        """Set a new password using an emailed reset token."""
        if password != confirm_password:
            raise ValidationFailed("The passwords do not match.")
        self._check_min_length(password, self.settings.reset_password_min_length)

        reset_token = self.validator.validate(token, TokenPurpose.RESET)
        user = get_user(self.db, reset_token.user_id)
        if not user:
            raise TokenNotFound()

        self._rotate(user, get_password_hash(password), reset_token)
        logger.info(f"Password reset completed for user {user.id}")

    # Known-session change path

    def request_change_code(self, user_id: int, email: str | None) -> None:
        """Mail a verification code for changing the password of the session user."""
        user = self._get_user(user_id)

        recipient = normalize_email(email or "")
        if not recipient:
            raise ValidationFailed("Please enter your email address.")
        if not EMAIL_PATTERN.match(recipient):
            logger.warning(f"Password change code: invalid email format for user {user_id}")
            raise ValidationFailed("Please enter a valid email address.")

        issued = self.issuer.issue(user.id, TokenPurpose.CHANGE)
        subject, html = change_code_message(
            self.settings,
            issued.secret,
            user.username,
            self.settings.password_change_code_ttl_minutes,
        )
        self.mailer.send(recipient, subject, html)
        logger.info(f"Password change code mailed for user {user.id}")

    def confirm_change(
        self,
        user_id: int,
        current_password: str,
        new_password: str,
        confirm_password: str,
        verification_code: str,
    ) -> None:
        """Change the password of the session user after checking the mailed code."""
        if new_password != confirm_password:
            raise ValidationFailed("The new password and its confirmation do not match.")
        self._check_min_length(new_password, self.settings.change_password_min_length)
        if current_password == new_password:
            raise ValidationFailed("Please choose a password different from the current one.")

        user = self._get_user(user_id)

        try:
            change_token = self.validator.validate(
                verification_code, TokenPurpose.CHANGE, user_id=user.id
            )
        except TokenNotFound:
            raise ValidationFailed("The verification code is not valid.") from None

        if not verify_password(current_password, user.password_hash):
            raise ValidationFailed("The current password is incorrect.")

        self._rotate(user, get_password_hash(new_password), change_token)
        logger.info(f"Password changed with verification code for user {user.id}")
        self._send_change_notice(user)

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Change the password of the session user with the current password only."""
        self._check_min_length(new_password, self.settings.simple_change_password_min_length)
        if current_password == new_password:
            raise ValidationFailed("Please choose a password different from the current one.")

        user = self._get_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise ValidationFailed("The current password is incorrect.")

        self._rotate(user, get_password_hash(new_password))
        logger.info(f"Password changed for user {user.id}")

    # Helpers

    def _get_user(self, user_id: int) -> User:
        user = get_user(self.db, user_id)
        if not user:
            logger.warning(f"Credential request for missing user {user_id}")
            raise NotFound(USER_NOT_FOUND)
        return user

    @staticmethod
    def _check_min_length(password: str, min_length: int) -> None:
        if len(password) < min_length:
            raise ValidationFailed(f"The password must be at least {min_length} characters long.")

    def _rotate(self, user: User, password_hash: str, token: CredentialToken | None = None) -> None:
        now = utc_now()
        user_id = user.id
        token_id = token.id if token is not None else None
        try:
            if token is not None and not self.store.consume(token, now=now):
                self.db.rollback()
                logger.info(f"Token {token_id} was consumed concurrently")
                raise TokenExpired()
            user.password_hash = password_hash
            invalidated = self.store.invalidate_outstanding(user_id, now=now)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Password update failed for user {user_id}: {e}")
            raise StorageError("The password could not be updated.") from e

        if invalidated:
            logger.info(f"Invalidated {invalidated} outstanding token(s) for user {user_id}")

    def _send_change_notice(self, user: User) -> None:
        if not user.email:
            return
        subject, html = password_changed_message(self.settings)
        try:
            self.mailer.send(user.email, subject, html)
        except MailDeliveryError:
            logger.warning(f"Password change notice could not be sent to user {user.id}")
