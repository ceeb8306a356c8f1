"""Authentication and credential schemas."""

from pydantic import ConfigDict, EmailStr, Field

from yang.schemas.base import CamelModel


class SignupRequest(CamelModel):
    """User signup request."""

    email: EmailStr = Field(..., max_length=255)
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(CamelModel):
    """User login request."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class EmailRequest(CamelModel):
    """Request carrying a single email address (find id, reset request, change code)."""

    email: str = Field(..., min_length=1, max_length=255)


class SimplePasswordChangeRequest(CamelModel):
    """Password change with the current password only."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class PasswordChangeConfirm(CamelModel):
    """Password change confirmed with a mailed verification code."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)
    verification_code: str = Field(..., min_length=1, max_length=16)


class ResetConfirmRequest(CamelModel):
    """Reset password confirmation."""

    token: str = Field(..., min_length=1, max_length=256)
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    avatar_url: str | None = None
    bio: str | None = None
    website: str | None = None


class AuthResponse(CamelModel):
    """Signup/login response with the session token and user info."""

    message: str
    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


class FindIdResponse(CamelModel):
    message: str
    username: str


class ResetDebug(CamelModel):
    reset_url: str


class ResetRequestResponse(CamelModel):
    """Generic answer to a reset request, identical whether or not the email exists."""

    message: str
    debug: ResetDebug | None = None


class TokenValidResponse(CamelModel):
    valid: bool = True
