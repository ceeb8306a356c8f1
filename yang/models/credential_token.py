"""Single-use credential token model (password reset links and change codes)."""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String

from yang.database import Base
from yang.models.enums import TokenPurpose
from yang.models.mixins import as_utc, utc_now


class CredentialToken(Base):
    """Stores the SHA-256 hash of a secret that was mailed to the user.

    The plaintext is never persisted. A row is active while ``used_at`` is
    null and ``expires_at`` is in the future.
    """

    __tablename__ = "password_reset_tokens"
    __table_args__ = (Index("ix_password_reset_tokens_user_unused", "user_id", "used_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    purpose = Column(
        Enum(
            TokenPurpose,
            name="tokenpurpose",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    token_hash = Column(String(64), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    # Set client-side so rows issued within the same second still order correctly
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def is_expired(self, now=None) -> bool:
        """Check whether the expiry time has passed."""
        return as_utc(self.expires_at) < (now or utc_now())

    @property
    def is_used(self) -> bool:
        return self.used_at is not None
