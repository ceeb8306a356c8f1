"""Domain errors and the HTTP status each one maps to."""

from fastapi import status


class YangError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(YangError):
    """Malformed or missing input, or a policy violation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Please check the submitted fields."


class AuthenticationRequired(YangError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please log in first."


class NotFound(YangError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "The requested resource could not be found."


class Conflict(YangError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "The resource already exists."


class TokenNotFound(NotFound):
    default_message = "This token is not valid."


class TokenExpired(YangError):
    """A used or expired token; the two causes are reported identically."""

    status_code = status.HTTP_410_GONE
    default_message = "This token has expired or has already been used."


class StorageError(YangError):
    default_message = "The request could not be saved. Please try again later."


class MailDeliveryError(YangError):
    """Outgoing mail could not be handed to the SMTP server."""

    default_message = "The email could not be sent. Please try again later."
