"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from yang.config import get_settings
from yang.database import get_db
from yang.exceptions import AuthenticationRequired, NotFound
from yang.models.user import User
from yang.services.accounts import AccountService
from yang.services.auth import decode_session_token, get_user
from yang.services.credentials import CredentialService
from yang.services.inquiry_service import InquiryService
from yang.services.mailer import Mailer, get_mailer
from yang.services.notification_service import NotificationService

security = HTTPBearer(auto_error=False)

INVALID_SESSION = "Your session is invalid or has expired. Please log in again."


def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int:
    """Resolve the caller from a bearer token, falling back to the session cookie.

    Both carry the same signed token; nothing else identifies the caller.
    """
    if credentials is not None:
        token = credentials.credentials
    else:
        token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        raise AuthenticationRequired()

    payload = decode_session_token(token)
    if payload is None or payload.get("sub") is None:
        raise AuthenticationRequired(INVALID_SESSION)

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationRequired(INVALID_SESSION) from None


def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the session user, 404 if the account no longer exists."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFound("User information could not be found.")
    return user


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
) -> AccountService:
    """Get account service with dependencies."""
    return AccountService(db)


def get_credential_service(
    db: Annotated[Session, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> CredentialService:
    """Get credential service with dependencies."""
    return CredentialService(db, mailer)


def get_notification_service(
    db: Annotated[Session, Depends(get_db)],
) -> NotificationService:
    """Get notification service with dependencies."""
    return NotificationService(db)


def get_inquiry_service(
    db: Annotated[Session, Depends(get_db)],
) -> InquiryService:
    """Get inquiry service with dependencies."""
    return InquiryService(db)
