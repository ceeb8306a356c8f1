"""Authentication, account and credential API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from yang.api.dependencies import (
    get_account_service,
    get_credential_service,
    get_current_user,
    get_current_user_id,
)
from yang.config import get_settings
from yang.exceptions import ValidationFailed
from yang.models.user import User
from yang.schemas.auth import (
    AuthResponse,
    EmailRequest,
    FindIdResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeConfirm,
    ResetConfirmRequest,
    ResetDebug,
    ResetRequestResponse,
    SignupRequest,
    SimplePasswordChangeRequest,
    TokenValidResponse,
    UserResponse,
)
from yang.services.accounts import AccountService
from yang.services.auth import create_session_token
from yang.services.credentials import CredentialService

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_REQUESTED_MESSAGE = (
    "If an account exists for this email, a password reset link is on its way. "
    "Please check your mailbox."
)


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure or settings.is_production,
        samesite="lax",
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name, path="/")


def _auth_response(response: Response, user: User, message: str) -> AuthResponse:
    token = create_session_token(user.id)
    _set_session_cookie(response, token)
    return AuthResponse(
        message=message,
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/signup", response_model=AuthResponse)
def signup(
    payload: SignupRequest,
    response: Response,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Create an account and start a session."""
    user = accounts.signup(
        payload.email, payload.username, payload.password, payload.confirm_password
    )
    return _auth_response(response, user, "Signed up successfully.")


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Login with email and password."""
    user = accounts.authenticate(credentials.email, credentials.password)
    return _auth_response(response, user, "Logged in successfully.")


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """Clear the session cookie."""
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully.")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    response: Response,
    user_id: Annotated[int, Depends(get_current_user_id)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Delete the session user's account and everything it owns."""
    accounts.delete_account(user_id)
    _clear_session_cookie(response)
    return MessageResponse(message="Your account has been deleted.")


@router.post("/find-id", response_model=FindIdResponse)
def find_id(
    payload: EmailRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Look up the username registered with an email."""
    username = accounts.find_username(payload.email)
    return FindIdResponse(message="Account found.", username=username)


@router.post("/password-change", response_model=MessageResponse)
def change_password(
    payload: SimplePasswordChangeRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Change the password with the current password only."""
    credentials.change_password(user_id, payload.current_password, payload.new_password)
    return MessageResponse(message="Your password has been changed.")


@router.post("/password/request", response_model=MessageResponse)
def request_password_change_code(
    payload: EmailRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Mail a verification code for a password change."""
    credentials.request_change_code(user_id, payload.email)
    return MessageResponse(
        message="A verification code has been sent to your email. Please check your mailbox."
    )


@router.patch("/password", response_model=MessageResponse)
def confirm_password_change(
    payload: PasswordChangeConfirm,
    user_id: Annotated[int, Depends(get_current_user_id)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Change the password using the mailed verification code."""
    credentials.confirm_change(
        user_id,
        payload.current_password,
        payload.new_password,
        payload.confirm_password,
        payload.verification_code,
    )
    return MessageResponse(message="Your password has been changed.")


@router.post(
    "/reset/request", response_model=ResetRequestResponse, response_model_exclude_none=True
)
def request_password_reset(
    payload: EmailRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Mail a password reset link. The answer does not reveal whether the email exists."""
    reset_url = credentials.request_reset(payload.email)
    result = ResetRequestResponse(message=RESET_REQUESTED_MESSAGE)
    if reset_url and get_settings().is_development:
        result.debug = ResetDebug(reset_url=reset_url)
    return result


@router.get("/reset/validate", response_model=TokenValidResponse)
def validate_reset_token(
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    token: str | None = None,
):
    """Check whether a reset token can still be used."""
    if not token:
        raise ValidationFailed("A token is required.")
    credentials.check_reset_token(token)
    return TokenValidResponse(valid=True)


@router.post("/reset/confirm", response_model=MessageResponse)
def confirm_password_reset(
    payload: ResetConfirmRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Set a new password with a reset token."""
    credentials.confirm_reset(payload.token, payload.password, payload.confirm_password)
    return MessageResponse(
        message="Your password has been reset. Please log in with your new password."
    )
