"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_title: str = "NotesHelp"
    api_version: str = "0.1.0"
    frontend_url: str = "http://localhost:3000"
    log_level: str = Field(default="INFO", description="Root log level")

    # Database (PostgreSQL for production, SQLite for dev)
    database_url: str = "sqlite+aiosqlite:///./data/noteshelp.db"

    # JWT
    jwt_secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # File storage
    storage_backend: Literal["local", "cloudinary"] = "local"
    upload_dir: Path = Path("data/uploads")
    upload_folder: str = "noteshelp"
    public_base_url: str = "http://localhost:8000"
    max_upload_size_bytes: int = 50 * 1024 * 1024

    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None

    # Bootstrap admin, created on startup when a password is configured
    admin_email: str = "admin@noteshelp.app"
    admin_name: str = "Administrator"
    admin_password: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Rewrite bare Postgres URLs to the asyncpg driver.

        Hosting providers hand out postgres:// but SQLAlchemy needs
        postgresql+asyncpg:// for the async engine.
        """
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
