"""Enums for model fields."""

from enum import Enum


class TokenPurpose(str, Enum):
    """Which credential workflow a token belongs to."""

    RESET = "reset"
    CHANGE = "change"


class InquiryStatus(str, Enum):
    """Lifecycle of a 1:1 support inquiry."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

    @classmethod
    def normalize(cls, value: str | None) -> "InquiryStatus":
        """Map free-form input to a known status, defaulting to pending."""
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.PENDING
