#!/usr/bin/env python
"""CLI script to create the first admin user.

Usage:
    python -m src.cli.create_admin admin@example.com "Site Admin"

This creates an admin user with a randomly generated password.
The password is printed to stdout - save it securely!

This script is idempotent - running it again with the same email
will do nothing if the user already exists.
"""

import asyncio
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.domain.services import generate_temp_password, hash_password
from src.storage.database import create_engine, create_session_factory, init_db
from src.storage.models import User


async def create_first_admin(
    db: AsyncSession,
    email: str,
    name: str,
    password: str | None = None,
) -> tuple[bool, str]:
    """Create an admin user, or promote an existing account.

    Args:
        db: Open database session
        email: Email address for the admin account
        name: Display name for a newly created account
        password: Password to set; a random one is generated when omitted

    Returns:
        Tuple of (created: bool, message: str)
        - If created=True, message contains the password
        - If created=False, message explains why (e.g., already exists)
    """
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()

    if existing:
        if existing.is_admin:
            return False, f"Admin user {email} already exists"
        # User exists but is not admin - upgrade them
        existing.is_admin = True
        await db.commit()
        return False, f"User {email} upgraded to admin (password unchanged)"

    password = password or generate_temp_password(16)
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        is_active=True,
        is_admin=True,
    )
    db.add(user)
    await db.commit()

    return True, password


async def run(email: str, name: str) -> tuple[bool, str]:
    engine = create_engine(get_settings().database_url)
    try:
        await init_db(engine)
        async with create_session_factory(engine)() as db:
            return await create_first_admin(db, email, name)
    finally:
        await engine.dispose()


def main():
    """Main entry point for CLI."""
    if len(sys.argv) != 3:
        print("Usage: python -m src.cli.create_admin <email> <name>")
        print('Example: python -m src.cli.create_admin admin@example.com "Site Admin"')
        sys.exit(1)

    email, name = sys.argv[1], sys.argv[2]

    # Basic email validation
    if "@" not in email or "." not in email:
        print(f"Error: Invalid email address: {email}")
        sys.exit(1)

    print(f"Creating admin user: {email}")

    created, message = asyncio.run(run(email, name))

    if created:
        print("\n" + "=" * 50)
        print("ADMIN USER CREATED SUCCESSFULLY")
        print("=" * 50)
        print(f"Email:    {email}")
        print(f"Password: {message}")
        print("=" * 50)
        print("\nIMPORTANT: Save this password securely!")
    else:
        print(f"\n{message}")


if __name__ == "__main__":
    main()
