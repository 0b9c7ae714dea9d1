"""User-related Pydantic schemas for API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserRead(BaseModel):
    """Schema for reading user data (excludes password)."""

    id: UUID
    name: str
    email: str
    is_active: bool
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}
