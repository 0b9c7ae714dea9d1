"""Account endpoints: register, login, logout, current user."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import bearer_token, require_auth
from src.domain.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from src.domain.schemas.user import UserRead
from src.domain.services import (
    create_access_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.storage.database import get_session
from src.storage.models import Session, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def start_session(request: Request, db: AsyncSession, user: User) -> TokenResponse:
    """Issue a JWT for ``user`` and record its session."""
    token, expires_at = create_access_token(user_id=user.id, is_admin=user.is_admin)

    session = Session(
        user_id=user.id,
        token_hash=hash_token(token),
        device_info=request.headers.get("User-Agent"),
        ip_address=request.client.host if request.client else None,
        expires_at=expires_at,
    )
    db.add(session)
    await db.commit()

    expires_in = int((expires_at - datetime.now(timezone.utc)).total_seconds())

    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=expires_in,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    register_data: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Create a regular (non-admin) account and log it in."""
    result = await db.execute(select(User).where(User.email == register_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(
        name=register_data.name,
        email=register_data.email,
        hashed_password=hash_password(register_data.password),
        is_active=True,
        is_admin=False,
    )
    db.add(user)
    await db.flush()

    logger.info("Registered user %s", user.id)
    return await start_session(request, db, user)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Authenticate user and return JWT token.

    - Returns 401 if credentials invalid
    - Returns 403 if account disabled
    """
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return await start_session(request, db, user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_session),
):
    """Revoke the session belonging to the presented token."""
    token = bearer_token(request)
    result = await db.execute(
        select(Session)
        .where(Session.token_hash == hash_token(token))
        .where(Session.user_id == current_user.id)
    )
    for session in result.scalars().all():
        session.is_revoked = True
    await db.commit()

    return None  # 204 No Content


@router.get("/me", response_model=UserRead)
async def me(current_user: User = Depends(require_auth)) -> UserRead:
    """Return the authenticated user."""
    return UserRead.model_validate(current_user)
