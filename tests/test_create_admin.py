"""Tests for the admin bootstrap routine."""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from src.api.main import app
from src.config import get_settings
from src.domain.services.auth import verify_password
from src.storage.file_storage import LocalFileStorage
from src.storage.models import User


@pytest.fixture
def startup_env(tmp_path, monkeypatch):
    """Point the application settings at a throwaway database and upload dir."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'startup.db'}")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("ADMIN_EMAIL", "boot@example.com")
    monkeypatch.setenv("ADMIN_NAME", "Boot Admin")
    monkeypatch.setenv("LOG_LEVEL", "info")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


async def find_user(email: str) -> User | None:
    async with app.state.session_factory() as db:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


@pytest.mark.asyncio
async def test_creates_admin_with_generated_password(db_session):
    from src.cli.create_admin import create_first_admin

    created, password = await create_first_admin(db_session, "root@example.com", "Root")

    assert created is True
    assert len(password) == 16
    result = await db_session.execute(select(User).where(User.email == "root@example.com"))
    user = result.scalar_one()
    assert user.is_admin is True
    assert user.name == "Root"
    assert verify_password(password, user.hashed_password)


@pytest.mark.asyncio
async def test_uses_given_password(db_session):
    from src.cli.create_admin import create_first_admin

    created, password = await create_first_admin(
        db_session, "root@example.com", "Root", password="configured-secret"
    )

    assert created is True
    assert password == "configured-secret"


@pytest.mark.asyncio
async def test_existing_admin_is_left_alone(db_session, admin_auth):
    from src.cli.create_admin import create_first_admin

    created, message = await create_first_admin(db_session, "admin@example.com", "Ignored")

    assert created is False
    assert "already exists" in message


@pytest.mark.asyncio
async def test_existing_user_is_promoted(db_session, user_auth):
    from src.cli.create_admin import create_first_admin

    user, _ = user_auth
    created, message = await create_first_admin(db_session, "student@example.com", "Ignored")

    assert created is False
    assert "upgraded to admin" in message
    await db_session.refresh(user)
    assert user.is_admin is True
    assert user.name == "Sam Student"


@pytest.mark.asyncio
async def test_startup_creates_configured_admin(startup_env):
    startup_env.setenv("ADMIN_PASSWORD", "bootstrap-secret")
    get_settings.cache_clear()

    with patch("src.api.main.setup_logging") as setup_logging:
        async with app.router.lifespan_context(app):
            assert isinstance(app.state.storage, LocalFileStorage)
            admin = await find_user("boot@example.com")

    setup_logging.assert_called_once_with("INFO")
    assert admin is not None
    assert admin.is_admin is True
    assert admin.name == "Boot Admin"
    assert verify_password("bootstrap-secret", admin.hashed_password)


@pytest.mark.asyncio
async def test_startup_without_admin_password_creates_nobody(startup_env):
    startup_env.delenv("ADMIN_PASSWORD", raising=False)
    get_settings.cache_clear()

    with patch("src.api.main.setup_logging"):
        async with app.router.lifespan_context(app):
            admin = await find_user("boot@example.com")

    assert admin is None
