"""Subject-related Pydantic schemas for API."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, StringConstraints

# Surrounding whitespace is stripped before the length check
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class SubjectWrite(BaseModel):
    """Body for creating or replacing a subject."""

    name: RequiredText
    description: str | None = None


class SubjectRead(BaseModel):
    """Schema for reading subject data."""

    id: UUID
    name: str
    description: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
