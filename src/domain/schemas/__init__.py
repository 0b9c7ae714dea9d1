"""Pydantic schemas for API request/response models."""

from .auth import LoginRequest, RegisterRequest, TokenResponse
from .document import DocumentRead, DocumentStatusUpdate, DocumentUploadForm, MessageResponse
from .subject import SubjectRead, SubjectWrite
from .user import UserRead

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserRead",
    "SubjectRead",
    "SubjectWrite",
    "DocumentRead",
    "DocumentStatusUpdate",
    "DocumentUploadForm",
    "MessageResponse",
]
