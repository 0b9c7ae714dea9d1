"""Pytest configuration and fixtures."""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import app
from src.domain.services.auth import create_access_token, hash_password, hash_token
from src.storage.database import create_engine, create_session_factory, init_db
from src.storage.file_storage import LocalFileStorage
from src.storage.models import Session, Subject, User


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_noteshelp.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def storage(tmp_path):
    """Local disk storage rooted in the test's temp directory."""
    return LocalFileStorage(tmp_path / "uploads", "http://test")


@pytest.fixture
async def client(engine, storage):
    """Async test client for FastAPI app.

    ASGITransport does not run the lifespan, so the resources it would
    build are installed on app.state directly.
    """
    app.state.session_factory = create_session_factory(engine)
    app.state.storage = storage
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
async def db_session(engine):
    """Async database session for tests."""
    async with create_session_factory(engine)() as session:
        yield session


async def create_user_with_token(
    db_session,
    email: str,
    name: str,
    is_admin: bool = False,
    password: str = "testpass123",
) -> tuple[User, dict]:
    """Create a user with an active session and return auth headers."""
    user = User(
        id=uuid4(),
        name=name,
        email=email,
        hashed_password=hash_password(password),
        is_active=True,
        is_admin=is_admin,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)

    token, expires_at = create_access_token(user_id=user.id, is_admin=is_admin)
    db_session.add(
        Session(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=expires_at,
            is_revoked=False,
        )
    )
    await db_session.commit()

    return user, {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_auth(db_session):
    """(admin user, auth headers)."""
    return await create_user_with_token(db_session, "admin@example.com", "Ada Admin", is_admin=True)


@pytest.fixture
async def user_auth(db_session):
    """(regular user, auth headers)."""
    return await create_user_with_token(db_session, "student@example.com", "Sam Student")


@pytest.fixture
async def subject(db_session):
    """A persisted subject to file documents under."""
    subject = Subject(name="Algorithms", description="Design and analysis")
    db_session.add(subject)
    await db_session.commit()
    await db_session.refresh(subject)
    return subject
