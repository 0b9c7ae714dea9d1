"""Document upload, listing and moderation endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from src.api.dependencies import get_session, get_storage, require_admin, require_auth
from src.api.errors import InternalServerError
from src.api.routes.subjects import get_subject_or_404
from src.config import Settings, get_settings
from src.domain.schemas.document import (
    DocumentRead,
    DocumentStatusUpdate,
    DocumentUploadForm,
    MessageResponse,
)
from src.storage.file_storage import (
    FileStorage,
    StorageError,
    file_type_from_filename,
    validate_upload_size,
)
from src.storage.models import Document, DocumentStatus, DocumentType, Subject, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

Uploader = aliased(User)
Approver = aliased(User)


def joined_documents_query():
    """Select documents with their subject, uploader and approver names.

    Outer joins throughout: a deleted subject leaves ``subject_name`` empty
    instead of hiding the document.
    """
    return (
        select(Document, Subject.name, Uploader.name, Approver.name)
        .outerjoin(Subject, Subject.id == Document.subject_id)
        .outerjoin(Uploader, Uploader.id == Document.uploaded_by)
        .outerjoin(Approver, Approver.id == Document.approved_by)
    )


def to_document_read(row) -> DocumentRead:
    document, subject_name, uploader_name, approver_name = row
    return DocumentRead(
        **document.model_dump(),
        subject_name=subject_name,
        uploaded_by_name=uploader_name,
        approved_by_name=approver_name,
    )


async def get_document_or_404(db: AsyncSession, document_id: UUID) -> Document:
    result = await db.execute(select(Document).where(Document.id == document_id))
    document = result.scalar_one_or_none()
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


async def read_document(db: AsyncSession, document_id: UUID) -> DocumentRead:
    result = await db.execute(joined_documents_query().where(Document.id == document_id))
    row = result.one_or_none()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return to_document_read(row)


def upload_form(
    title: str = Form(..., min_length=1, max_length=255),
    subject: UUID = Form(...),
    document_type: DocumentType = Form(..., alias="type"),
    description: str | None = Form(None),
) -> DocumentUploadForm:
    """Collect the multipart metadata fields into a typed form."""
    try:
        return DocumentUploadForm(
            title=title, subject=subject, type=document_type, description=description
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


@router.get("", response_model=list[DocumentRead])
async def list_documents(
    subject_id: UUID | None = Query(None, alias="subject", description="Filter by subject id"),
    document_type: DocumentType | None = Query(None, alias="type", description="notes or papers"),
    status_filter: DocumentStatus | None = Query(None, alias="status", description="Moderation state"),
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
) -> list[DocumentRead]:
    """List documents, newest first.

    Filters combine with AND logic; omitted filters match everything.
    """
    conditions = []
    if subject_id is not None:
        conditions.append(Document.subject_id == subject_id)
    if document_type is not None:
        conditions.append(Document.type == document_type)
    if status_filter is not None:
        conditions.append(Document.status == status_filter)

    query = joined_documents_query()
    if conditions:
        query = query.where(*conditions)

    result = await db.execute(query.order_by(Document.created_at.desc()))
    return [to_document_read(row) for row in result.all()]


@router.get("/{document_id}", response_model=DocumentRead)
async def get_document(
    document_id: UUID,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
) -> DocumentRead:
    return await read_document(db, document_id)


@router.post("", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def upload_document(
    form: DocumentUploadForm = Depends(upload_form),
    file: UploadFile = File(...),
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> DocumentRead:
    """Upload a note or past paper.

    The file goes to external storage first; the record is created with
    status ``pending`` and no approver.

    Raises:
        HTTPException 400: Extension not pdf/docx, or empty file
        HTTPException 404: Subject does not exist
        HTTPException 413: File exceeds the configured maximum size
        HTTPException 500: Storage or database failure
    """
    file_type = file_type_from_filename(file.filename)

    # file.size might be None for some clients, so size is checked again after reading
    if file.size and file.size > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_upload_size_bytes // (1024 * 1024)}MB.",
        )
    content = await file.read()
    validate_upload_size(content, settings.max_upload_size_bytes)

    await get_subject_or_404(db, form.subject)

    try:
        file_url = await storage.upload(file.filename, content, settings.upload_folder)
    except StorageError as e:
        raise InternalServerError("Error uploading document", e) from e

    document = Document(
        title=form.title,
        description=form.description,
        subject_id=form.subject,
        type=form.type,
        file_url=file_url,
        file_type=file_type,
        uploaded_by=current_user.id,
        status=DocumentStatus.PENDING,
    )
    try:
        db.add(document)
        await db.commit()
    except Exception as e:
        await db.rollback()
        try:
            await storage.delete(file_url)
        except StorageError:
            logger.warning("Could not remove stored file %s after failed insert", file_url)
        raise InternalServerError("Error uploading document", e) from e

    logger.info("User %s uploaded document %s (%s)", current_user.id, document.id, file_type.value)
    return await read_document(db, document.id)


@router.patch("/{document_id}/status", response_model=DocumentRead)
async def update_document_status(
    document_id: UUID,
    status_update: DocumentStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> DocumentRead:
    """Set a document's moderation status (admin only).

    Any status may be set from any other; the acting admin is recorded
    as ``approved_by`` every time.
    """
    document = await get_document_or_404(db, document_id)
    previous = document.status

    document.status = status_update.status
    document.approved_by = admin.id
    try:
        await db.commit()
    except Exception as e:
        raise InternalServerError("Error updating document status", e) from e

    logger.info(
        "Admin %s moved document %s from %s to %s",
        admin.id, document_id, previous.value, status_update.status.value,
    )
    return await read_document(db, document_id)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    storage: FileStorage = Depends(get_storage),
) -> MessageResponse:
    """Delete a document and its stored file (admin only).

    The stored file is removed first, then the record. The two steps are
    not atomic: if the record delete fails after the file is gone, the
    record is left pointing at a missing file and an error is logged.
    """
    document = await get_document_or_404(db, document_id)
    file_url = document.file_url

    try:
        await storage.delete(file_url)
    except StorageError as e:
        raise InternalServerError("Error deleting document", e) from e

    try:
        await db.delete(document)
        await db.commit()
    except Exception as e:
        logger.error(
            "Stored file for document %s was deleted but the record was not; file_url=%s",
            document_id, file_url,
        )
        raise InternalServerError("Error deleting document", e) from e

    logger.info("Admin %s deleted document %s", admin.id, document_id)
    return MessageResponse(message="Document deleted successfully")
