"""Shared FastAPI dependencies.

Central location for dependency injection functions.
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.services import hash_token, verify_token
from src.storage.database import get_session
from src.storage.file_storage import get_storage
from src.storage.models import Session, User

__all__ = ["get_session", "get_storage", "get_current_user", "require_auth", "require_admin"]


def bearer_token(request: Request) -> str | None:
    """Extract the bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Get current user from JWT token if present.

    Returns None if no token or invalid token.
    Use require_auth for endpoints that must have authentication.
    """
    token = bearer_token(request)
    if not token:
        return None

    payload = verify_token(token)
    if not payload:
        return None

    # Verify session is still valid (not revoked)
    session_result = await db.execute(
        select(Session)
        .where(Session.token_hash == hash_token(token))
        .where(Session.is_revoked == False)  # noqa: E712
        .limit(1)
    )
    if not session_result.scalar_one_or_none():
        return None

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def require_auth(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> User:
    """Require valid authentication.

    Returns the authenticated user.
    Raises 401 if not authenticated.
    Raises 403 if the account is disabled.
    """
    user = await get_current_user(request, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return user


async def require_admin(user: User = Depends(require_auth)) -> User:
    """Require admin authentication.

    Returns the authenticated admin user.
    Raises 401 if not authenticated.
    Raises 403 if not admin.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return user
