"""Inquiry schemas."""

from datetime import datetime

from yang.schemas.base import CamelModel


class AttachmentResponse(CamelModel):
    name: str
    path: str
    size: int
    content_type: str
    url: str


class InquiryResponse(CamelModel):
    """Schema for an inquiry as shown to its author."""

    id: int
    title: str
    content: str
    status: str
    response: str | None
    image_url: str | None
    attachments: list[AttachmentResponse]
    created_at: datetime
    updated_at: datetime
    responded_at: datetime | None
    status_changed_at: datetime | None
    last_viewed_at: datetime | None


class InquiryListResponse(CamelModel):
    inquiries: list[InquiryResponse]


class InquiryEnvelope(CamelModel):
    inquiry: InquiryResponse


class UnreadCountResponse(CamelModel):
    count: int
