"""Database models for NotesHelp.

Uses SQLModel for unified Pydantic + SQLAlchemy models.
All models use table=True to create database tables.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class DocumentType(str, Enum):
    """Kind of study material."""

    NOTES = "notes"
    PAPERS = "papers"


class FileType(str, Enum):
    """Accepted upload formats, keyed by file extension."""

    PDF = "pdf"
    DOCX = "docx"


class DocumentStatus(str, Enum):
    """Moderation states. Any state may move to any other."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class User(SQLModel, table=True):
    """User account for authentication."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str = Field(max_length=255)
    is_active: bool = Field(default=True)
    is_admin: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships
    sessions: list["Session"] = Relationship(back_populates="user")


class Subject(SQLModel, table=True):
    """A topic that documents are filed under.

    Names are unique by convention only.
    """

    __tablename__ = "subjects"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    description: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class Document(SQLModel, table=True):
    """Metadata for an uploaded note or past paper.

    The file itself lives in external storage; only its URL is kept here.
    ``subject_id`` carries no foreign key: deleting a subject leaves its
    documents pointing at the removed id.
    """

    __tablename__ = "documents"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None)
    subject_id: UUID = Field(index=True)
    type: DocumentType
    file_url: str = Field(max_length=1000)
    file_type: FileType
    uploaded_by: UUID = Field(foreign_key="users.id", index=True)
    status: DocumentStatus = Field(default=DocumentStatus.PENDING, index=True)
    approved_by: UUID | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)


class Session(SQLModel, table=True):
    """Active user session tracking.

    Tracks JWT tokens for session management and revocation.
    Token is hashed (SHA256) for secure lookup without storing the JWT.
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=64, index=True)  # SHA256 hash of JWT
    device_info: str | None = Field(default=None, max_length=500)
    ip_address: str | None = Field(default=None, max_length=45)  # IPv6 max length
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))
    is_revoked: bool = Field(default=False)

    # Relationships
    user: User = Relationship(back_populates="sessions")
