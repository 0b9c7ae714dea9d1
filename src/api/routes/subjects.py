"""Subject catalog endpoints.

Any authenticated user can read; only admins can create, replace or delete.
Deleting a subject leaves its documents in place.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_session, require_admin, require_auth
from src.api.errors import InternalServerError
from src.domain.schemas.document import MessageResponse
from src.domain.schemas.subject import SubjectRead, SubjectWrite
from src.storage.models import Subject, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])


async def get_subject_or_404(db: AsyncSession, subject_id: UUID) -> Subject:
    result = await db.execute(select(Subject).where(Subject.id == subject_id))
    subject = result.scalar_one_or_none()
    if not subject:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return subject


@router.get("", response_model=list[SubjectRead])
async def list_subjects(
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
) -> list[SubjectRead]:
    """List all subjects ordered by name."""
    result = await db.execute(select(Subject).order_by(Subject.name.asc()))
    return [SubjectRead.model_validate(s) for s in result.scalars().all()]


@router.get("/{subject_id}", response_model=SubjectRead)
async def get_subject(
    subject_id: UUID,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
) -> SubjectRead:
    subject = await get_subject_or_404(db, subject_id)
    return SubjectRead.model_validate(subject)


@router.post("", response_model=SubjectRead, status_code=status.HTTP_201_CREATED)
async def create_subject(
    subject_data: SubjectWrite,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SubjectRead:
    """Create a subject (admin only)."""
    subject = Subject(name=subject_data.name, description=subject_data.description)
    try:
        db.add(subject)
        await db.commit()
        await db.refresh(subject)
    except Exception as e:
        raise InternalServerError("Error creating subject", e) from e

    logger.info("Admin %s created subject %s (%s)", admin.id, subject.id, subject.name)
    return SubjectRead.model_validate(subject)


@router.put("/{subject_id}", response_model=SubjectRead)
async def update_subject(
    subject_id: UUID,
    subject_data: SubjectWrite,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SubjectRead:
    """Replace a subject's name and description (admin only)."""
    subject = await get_subject_or_404(db, subject_id)

    subject.name = subject_data.name
    subject.description = subject_data.description
    try:
        await db.commit()
        await db.refresh(subject)
    except Exception as e:
        raise InternalServerError("Error updating subject", e) from e

    logger.info("Admin %s updated subject %s", admin.id, subject.id)
    return SubjectRead.model_validate(subject)


@router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete a subject (admin only). Documents filed under it are kept."""
    subject = await get_subject_or_404(db, subject_id)

    try:
        await db.delete(subject)
        await db.commit()
    except Exception as e:
        raise InternalServerError("Error deleting subject", e) from e

    logger.info("Admin %s deleted subject %s", admin.id, subject_id)
    return MessageResponse(message="Subject deleted successfully")
