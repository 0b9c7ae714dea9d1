"""Async database configuration with PostgreSQL/SQLite support.

Uses asyncpg for PostgreSQL or aiosqlite for SQLite.
SQLModel provides the ORM layer on top of SQLAlchemy.

The engine and session factory are built once by the application lifespan
and kept on ``app.state``; request handlers reach them via ``get_session``.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with driver-appropriate settings."""
    engine_kwargs = {
        "echo": False,
        "future": True,
    }

    # SQLite needs special handling for async
    if "sqlite" in database_url:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        database = make_url(database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(database_url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Async session factory bound to ``engine``."""
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables.

    Called on application startup. Safe to call multiple times -
    SQLModel only creates tables that don't exist.
    """
    # Import models to ensure they're registered with SQLModel.metadata
    from src.storage import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
