"""Issuing, validating and consuming single-use credential tokens.

Only the SHA-256 hash of a secret is stored. Reset secrets are 64 hex
characters delivered in a link; change secrets are 6-digit codes hashed with a
``change:`` prefix so the two formats never share a hash space.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yang.config import Settings, get_settings
from yang.exceptions import StorageError, TokenExpired, TokenNotFound
from yang.models.credential_token import CredentialToken
from yang.models.enums import TokenPurpose
from yang.models.mixins import utc_now

logger = logging.getLogger(__name__)

CHANGE_CODE_PREFIX = "change:"


def generate_secret(purpose: TokenPurpose) -> str:
    """Create a fresh plaintext secret for the given purpose."""
    if purpose is TokenPurpose.CHANGE:
        return str(100000 + secrets.randbelow(900000))
    return secrets.token_hex(32)


def hash_secret(secret: str, purpose: TokenPurpose) -> str:
    """One-way hash of a secret as stored in the token table."""
    material = f"{CHANGE_CODE_PREFIX}{secret}" if purpose is TokenPurpose.CHANGE else secret
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


@dataclass
class IssuedToken:
    """A persisted token row together with the plaintext that was hashed into it."""

    token: CredentialToken
    secret: str


class TokenStore:
    """Write-side helpers for the token table."""

    def __init__(self, db: Session):
        self.db = db

    def consume(self, token: CredentialToken, now: datetime | None = None) -> bool:
        """Mark a token used if nobody else has.

        This conditional update is the only gate for consumption: of two
        concurrent callers exactly one sees an affected row.
        """
        result = self.db.execute(
            update(CredentialToken)
            .where(CredentialToken.id == token.id, CredentialToken.used_at.is_(None))
            .values(used_at=now or utc_now())
        )
        return result.rowcount == 1

    def invalidate_outstanding(
        self,
        user_id: int,
        exclude_id: int | None = None,
        now: datetime | None = None,
    ) -> int:
        """Mark every unused token of a user as used. Returns the number of rows touched."""
        stmt = update(CredentialToken).where(
            CredentialToken.user_id == user_id,
            CredentialToken.used_at.is_(None),
        )
        if exclude_id is not None:
            stmt = stmt.where(CredentialToken.id != exclude_id)
        result = self.db.execute(stmt.values(used_at=now or utc_now()))
        return result.rowcount

    def purge(self, before: datetime) -> int:
        """Delete rows that expired or were used before the cutoff."""
        result = self.db.execute(
            delete(CredentialToken).where(
                or_(CredentialToken.expires_at < before, CredentialToken.used_at < before)
            )
        )
        return result.rowcount


class TokenIssuer:
    """Creates new tokens, superseding whatever the user still had outstanding."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.store = TokenStore(db)

    def ttl_for(self, purpose: TokenPurpose) -> timedelta:
        if purpose is TokenPurpose.CHANGE:
            return timedelta(minutes=self.settings.password_change_code_ttl_minutes)
        return timedelta(minutes=self.settings.password_reset_token_ttl_minutes)

    def issue(self, user_id: int, purpose: TokenPurpose) -> IssuedToken:
        """Persist a new token for the user and return it with its plaintext.

        Superseding old tokens and inserting the new row share one transaction.
        """
        now = utc_now()
        secret = generate_secret(purpose)
        try:
            superseded = self.store.invalidate_outstanding(user_id, now=now)
            token = CredentialToken(
                user_id=user_id,
                purpose=purpose,
                token_hash=hash_secret(secret, purpose),
                expires_at=now + self.ttl_for(purpose),
                created_at=now,
            )
            self.db.add(token)
            self.db.commit()
            self.db.refresh(token)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store {purpose.value} token for user {user_id}: {e}")
            raise StorageError("The request could not be processed. Please try again later.") from e

        logger.info(
            f"Issued {purpose.value} token {token.id} for user {user_id} "
            f"(superseded {superseded})"
        )
        return IssuedToken(token=token, secret=secret)


class TokenValidator:
    """Read-only lookup and classification of a presented secret."""

    def __init__(self, db: Session):
        self.db = db

    def lookup(self, secret: str, purpose: TokenPurpose) -> CredentialToken | None:
        """Newest token row whose hash matches the secret."""
        return (
            self.db.query(CredentialToken)
            .filter(
                CredentialToken.token_hash == hash_secret(secret, purpose),
                CredentialToken.purpose == purpose,
            )
            .order_by(CredentialToken.created_at.desc(), CredentialToken.id.desc())
            .first()
        )

    def validate(
        self,
        secret: str,
        purpose: TokenPurpose,
        user_id: int | None = None,
        now: datetime | None = None,
    ) -> CredentialToken:
        """Return the active token for a secret.

        Raises:
            TokenNotFound: no row matches, or it belongs to a different user than ``user_id``.
            TokenExpired: the row was used or its expiry has passed.
        """
        token = self.lookup(secret, purpose)
        if token is None or (user_id is not None and token.user_id != user_id):
            raise TokenNotFound()
        if token.is_used or token.is_expired(now):
            raise TokenExpired()
        return token
