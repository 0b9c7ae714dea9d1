"""Authentication schemas for request/response models."""

from pydantic import BaseModel, EmailStr, Field

from src.domain.schemas.user import UserRead


class RegisterRequest(BaseModel):
    """New account details. Registered accounts are never admins."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    """Login request with credentials."""

    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until expiration
    user: UserRead
