"""1:1 support inquiries with file attachments stored on local disk."""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yang.config import Settings, get_settings
from yang.exceptions import NotFound, StorageError, ValidationFailed
from yang.models import Inquiry
from yang.models.enums import InquiryStatus
from yang.models.mixins import as_utc, utc_now

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass
class AttachmentUpload:
    """A file received with an inquiry, already read into memory."""

    filename: str
    content_type: str
    data: bytes


class InquiryService:
    """Service for a user's support inquiries."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.upload_dir = Path(self.settings.inquiry_upload_dir)

    def list_for_user(self, user_id: int, status: str | None = None) -> list[Inquiry]:
        """Inquiries of a user, newest first, optionally filtered by status."""
        query = self.db.query(Inquiry).filter(Inquiry.user_id == user_id)
        if status and status != "all":
            query = query.filter(Inquiry.status == InquiryStatus.normalize(status))
        return query.order_by(Inquiry.created_at.desc(), Inquiry.id.desc()).all()

    def create(
        self,
        user_id: int,
        title: str | None,
        content: str | None,
        attachments: list[AttachmentUpload] | None = None,
        image_url: str | None = None,
    ) -> Inquiry:
        """Validate, store attachments and insert a new pending inquiry."""
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            raise ValidationFailed("Please enter both a title and content.")
        if len(title) > self.settings.inquiry_title_max_length:
            raise ValidationFailed(
                f"The title must be {self.settings.inquiry_title_max_length} characters or fewer."
            )
        if len(content) > self.settings.inquiry_content_max_length:
            raise ValidationFailed(
                f"The content must be {self.settings.inquiry_content_max_length} characters or fewer."
            )

        stored = self._store_attachments(user_id, attachments or [])

        now = utc_now()
        inquiry = Inquiry(
            user_id=user_id,
            title=title,
            content=content,
            status=InquiryStatus.PENDING,
            attachments=stored,
            image_url=image_url,
            created_at=now,
            updated_at=now,
            last_viewed_at=now,
        )
        self.db.add(inquiry)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create inquiry for user {user_id}: {e}")
            self._remove_files([item["path"] for item in stored])
            raise StorageError("The inquiry could not be submitted.") from e

        self.db.refresh(inquiry)
        logger.info(f"Inquiry {inquiry.id} created by user {user_id} with {len(stored)} file(s)")
        return inquiry

    def unread_count(self, user_id: int) -> int:
        """Count inquiries with activity newer than the user's last view."""
        rows = self.db.query(Inquiry).filter(Inquiry.user_id == user_id).all()
        count = 0
        for row in rows:
            last_viewed = as_utc(row.last_viewed_at) or _EPOCH
            latest = max(
                as_utc(row.responded_at) or _EPOCH,
                as_utc(row.status_changed_at) or _EPOCH,
                as_utc(row.updated_at) or _EPOCH,
            )
            if latest > last_viewed:
                count += 1
        return count

    def mark_viewed(self, user_id: int) -> None:
        self.db.query(Inquiry).filter(Inquiry.user_id == user_id).update(
            {Inquiry.last_viewed_at: utc_now()}, synchronize_session=False
        )
        self.db.commit()

    def attachment_path(self, user_id: int, inquiry_id: int, index: int) -> tuple[Path, dict]:
        """Resolve a stored attachment of the user's own inquiry."""
        inquiry = (
            self.db.query(Inquiry)
            .filter(Inquiry.id == inquiry_id, Inquiry.user_id == user_id)
            .first()
        )
        attachments = inquiry.attachments if inquiry else None
        if not attachments or not 0 <= index < len(attachments):
            raise NotFound("The attachment could not be found.")
        item = attachments[index]
        path = self.upload_dir / item["path"]
        if not path.is_file():
            raise NotFound("The attachment could not be found.")
        return path, item

    def _store_attachments(self, user_id: int, files: list[AttachmentUpload]) -> list[dict]:
        files = [f for f in files if f.data]
        max_count = self.settings.inquiry_max_attachments
        max_size = self.settings.inquiry_max_attachment_size
        if not files or max_count <= 0:
            return []
        if len(files) > max_count:
            raise ValidationFailed(f"You can attach up to {max_count} files.")
        if max_size > 0 and any(len(f.data) > max_size for f in files):
            raise ValidationFailed(
                f"Each attachment must be {max_size / (1024 * 1024):.1f}MB or smaller."
            )

        stored: list[dict] = []
        try:
            user_dir = self.upload_dir / str(user_id)
            user_dir.mkdir(parents=True, exist_ok=True)
            for f in files:
                original_name = f.filename or "attachment"
                safe_name = _UNSAFE_FILENAME_CHARS.sub("-", original_name)
                relative = f"{user_id}/{uuid.uuid4()}-{safe_name}"
                (self.upload_dir / relative).write_bytes(f.data)
                stored.append(
                    {
                        "name": original_name,
                        "path": relative,
                        "size": len(f.data),
                        "contentType": f.content_type or "application/octet-stream",
                    }
                )
        except OSError as e:
            logger.error(f"Attachment upload error for user {user_id}: {e}")
            self._remove_files([item["path"] for item in stored])
            raise StorageError("The attachments could not be uploaded.") from e
        return stored

    def _remove_files(self, paths: list[str]) -> None:
        for relative in paths:
            try:
                (self.upload_dir / relative).unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Attachment cleanup failed for {relative}: {e}")
