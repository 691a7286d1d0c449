"""
Script to create a local user (optionally a global admin) and print a bearer token.

Usage:
    python -m app.scripts.create_local_admin --username admin --admin
    python -m app.scripts.create_local_admin --username alice --org "Org A"
"""

import argparse
import asyncio
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import create_jwt
from app.core.config import get_settings
from app.core.database import create_session_factory, create_store_engine
from app.models.organization import Organization
from app.models.organization_user import OrganizationUser
from app.models.user import User


async def ensure_user(
    session: AsyncSession,
    username: str,
    *,
    is_admin: bool = False,
    organizations: Sequence[str] = (),
) -> User:
    """Create the user if missing and make it a member of each named organization."""
    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user:
        user = User(username=username, is_admin=is_admin)
        session.add(user)
        print(f"Created user: {username}")
    else:
        user.is_admin = is_admin or user.is_admin
        print(f"User {username} already exists.")
    await session.flush()

    for name in organizations:
        result = await session.execute(select(Organization).where(Organization.name == name))
        org = result.scalar_one_or_none()
        if not org:
            org = Organization(name=name, display_name=name)
            session.add(org)
            await session.flush()
            print(f"Created organization: {name}")

        result = await session.execute(
            select(OrganizationUser).where(
                OrganizationUser.user_id == user.id,
                OrganizationUser.organization_id == org.id,
            )
        )
        if not result.scalar_one_or_none():
            session.add(OrganizationUser(user_id=user.id, organization_id=org.id))
            print(f"Added {username} to {name}.")

    await session.flush()
    return user


async def main(username: str, is_admin: bool, organizations: Sequence[str]) -> None:
    settings = get_settings()
    engine = create_store_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    async with session_factory() as session:
        await ensure_user(session, username, is_admin=is_admin, organizations=organizations)
        await session.commit()
    await engine.dispose()

    print(create_jwt(username, settings))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local user and print a bearer token.")
    parser.add_argument("--username", required=True, help="Username for the user")
    parser.add_argument("--admin", action="store_true", help="Make the user a global admin")
    parser.add_argument(
        "--org", action="append", default=[], help="Organization to join (repeatable)"
    )

    args = parser.parse_args()

    asyncio.run(main(args.username, args.admin, args.org))
