"""Support inquiry API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from yang.api.dependencies import get_current_user_id, get_inquiry_service
from yang.models import Inquiry
from yang.schemas.base import OkResponse
from yang.schemas.inquiry import (
    AttachmentResponse,
    InquiryEnvelope,
    InquiryListResponse,
    InquiryResponse,
    UnreadCountResponse,
)
from yang.services.inquiry_service import AttachmentUpload, InquiryService

router = APIRouter(prefix="/inquiries", tags=["inquiries"])


def _to_response(inquiry: Inquiry) -> InquiryResponse:
    attachments = [
        AttachmentResponse(
            name=item["name"],
            path=item["path"],
            size=item["size"],
            content_type=item.get("contentType", "application/octet-stream"),
            url=f"/inquiries/{inquiry.id}/attachments/{index}",
        )
        for index, item in enumerate(inquiry.attachments or [])
    ]
    return InquiryResponse(
        id=inquiry.id,
        title=inquiry.title,
        content=inquiry.content,
        status=inquiry.status.value,
        response=inquiry.response,
        image_url=inquiry.image_url,
        attachments=attachments,
        created_at=inquiry.created_at,
        updated_at=inquiry.updated_at,
        responded_at=inquiry.responded_at,
        status_changed_at=inquiry.status_changed_at,
        last_viewed_at=inquiry.last_viewed_at,
    )


@router.get("", response_model=InquiryListResponse)
async def list_inquiries(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[InquiryService, Depends(get_inquiry_service)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
):
    """List the caller's inquiries, newest first."""
    inquiries = service.list_for_user(user_id, status_filter)
    return InquiryListResponse(inquiries=[_to_response(i) for i in inquiries])


@router.post("", response_model=InquiryEnvelope, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[InquiryService, Depends(get_inquiry_service)],
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    image_url: Annotated[str | None, Form()] = None,
    attachments: Annotated[list[UploadFile] | None, File()] = None,
):
    """Submit a new inquiry with optional file attachments."""
    uploads = []
    for upload in attachments or []:
        data = await upload.read()
        uploads.append(
            AttachmentUpload(
                filename=upload.filename or "attachment",
                content_type=upload.content_type or "application/octet-stream",
                data=data,
            )
        )

    inquiry = service.create(user_id, title, content, uploads, image_url=image_url or None)
    return InquiryEnvelope(inquiry=_to_response(inquiry))


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[InquiryService, Depends(get_inquiry_service)],
):
    """Count inquiries with news since the caller last looked."""
    return UnreadCountResponse(count=service.unread_count(user_id))


@router.post("/mark-viewed", response_model=OkResponse)
async def mark_viewed(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[InquiryService, Depends(get_inquiry_service)],
):
    service.mark_viewed(user_id)
    return OkResponse()


@router.get("/{inquiry_id}/attachments/{index}")
async def download_attachment(
    inquiry_id: int,
    index: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[InquiryService, Depends(get_inquiry_service)],
):
    """Download an attachment of one of the caller's inquiries."""
    path, item = service.attachment_path(user_id, inquiry_id, index)
    return FileResponse(
        path,
        media_type=item.get("contentType", "application/octet-stream"),
        filename=item["name"],
    )
