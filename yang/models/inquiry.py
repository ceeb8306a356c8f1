"""1:1 support inquiry model."""

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Integer, String, Text

from yang.database import Base
from yang.models.enums import InquiryStatus
from yang.models.mixins import utc_now


class Inquiry(Base):
    """A support ticket opened by a user.

    ``updated_at`` is maintained explicitly so that marking the thread as
    viewed does not count as new activity.
    """

    __tablename__ = "user_inquiries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(
        Enum(
            InquiryStatus,
            name="inquirystatus",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=InquiryStatus.PENDING,
        nullable=False,
    )
    response = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    last_viewed_at = Column(DateTime(timezone=True), nullable=True)
