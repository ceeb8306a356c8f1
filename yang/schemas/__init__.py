"""Pydantic schemas for API requests and responses."""

from yang.schemas.auth import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from yang.schemas.inquiry import InquiryResponse
from yang.schemas.notification import NotificationResponse

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "AuthResponse",
    "UserResponse",
    "NotificationResponse",
    "InquiryResponse",
]
