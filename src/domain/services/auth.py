"""Authentication service with password hashing and JWT operations."""

import hashlib
import secrets
import string
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher

from src.config import get_settings

# Password hashing using bcrypt via pwdlib
pwd_context = PasswordHash((BcryptHasher(),))


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: UUID, is_admin: bool) -> tuple[str, datetime]:
    """Create JWT access token.

    Args:
        user_id: User's UUID
        is_admin: Whether user has admin role

    Returns:
        Tuple of (token, expires_at datetime)
    """
    settings = get_settings()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {
        "sub": str(user_id),
        "is_admin": is_admin,
        "exp": expires_at,
        # Unique per token so two logins in the same second get distinct sessions
        "jti": secrets.token_hex(8),
    }
    token = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def verify_token(token: str) -> dict | None:
    """Verify and decode JWT.

    Returns:
        Decoded payload dict or None if invalid/expired
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def hash_token(token: str) -> str:
    """SHA256 hash of token for storage/lookup.

    Used for session tracking without storing the actual JWT.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def generate_temp_password(length: int = 12) -> str:
    """Generate a random alphanumeric temporary password."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
