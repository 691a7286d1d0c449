"""
Tests for the local user bootstrap script.
"""

from sqlmodel import select

from app.models import Organization, OrganizationUser, User
from app.scripts.create_local_admin import ensure_user


async def test_creates_user_and_memberships(session_factory):
    async with session_factory() as session:
        user = await ensure_user(session, "erin", organizations=["lab", "field"])
        await session.commit()

    async with session_factory() as session:
        orgs = (await session.execute(select(Organization.name).order_by(Organization.name))).scalars().all()
        memberships = (
            await session.execute(
                select(OrganizationUser).where(OrganizationUser.user_id == user.id)
            )
        ).scalars().all()
    assert orgs == ["field", "lab"]
    assert len(memberships) == 2
    assert user.is_admin is False


async def test_is_idempotent(session_factory):
    async with session_factory() as session:
        await ensure_user(session, "erin", organizations=["lab"])
        await ensure_user(session, "erin", is_admin=True, organizations=["lab"])
        await session.commit()

    async with session_factory() as session:
        users = (await session.execute(select(User).where(User.username == "erin"))).scalars().all()
        memberships = (await session.execute(select(OrganizationUser))).scalars().all()
    assert len(users) == 1
    assert users[0].is_admin is True
    assert len(memberships) == 1


async def test_existing_organization_is_reused(seeded):
    async with seeded() as session:
        user = await ensure_user(session, "alice", organizations=["org-beta"])
        await session.commit()

    async with seeded() as session:
        orgs = (await session.execute(select(Organization))).scalars().all()
        org_ids = (
            await session.execute(
                select(OrganizationUser.organization_id).where(OrganizationUser.user_id == user.id)
            )
        ).scalars().all()
    assert len(orgs) == 3
    assert sorted(org_ids) == [1, 2]
