"""Document-related Pydantic schemas for API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.schemas.subject import RequiredText
from src.storage.models import DocumentStatus, DocumentType, FileType


class DocumentUploadForm(BaseModel):
    """Metadata fields of the multipart upload.

    The file itself travels alongside as a single ``UploadFile``.
    """

    title: RequiredText
    subject: UUID
    type: DocumentType
    description: str | None = None


class DocumentStatusUpdate(BaseModel):
    """Body for the moderation endpoint."""

    status: DocumentStatus


class DocumentRead(BaseModel):
    """Document joined with subject, uploader and approver names.

    ``subject_name`` is None when the subject has since been deleted.
    """

    id: UUID
    title: str
    description: str | None = None
    subject_id: UUID
    subject_name: str | None = Field(default=None, description="Name of the referenced subject")
    type: DocumentType
    file_url: str
    file_type: FileType
    status: DocumentStatus
    uploaded_by: UUID
    uploaded_by_name: str | None = None
    approved_by: UUID | None = None
    approved_by_name: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Confirmation body for deletes."""

    message: str
