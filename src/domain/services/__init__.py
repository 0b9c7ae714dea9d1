"""Account services: password hashing, access tokens and session token digests."""

from .auth import (
    create_access_token,
    generate_temp_password,
    hash_password,
    hash_token,
    verify_password,
    verify_token,
)

__all__ = [
    "create_access_token",
    "generate_temp_password",
    "hash_password",
    "hash_token",
    "verify_password",
    "verify_token",
]
