"""
Tests for the organization-rooted visibility predicate.
"""

from __future__ import annotations

from sqlmodel import select

from app.models import Organization, OrganizationUser
from app.services.listing import ListingEngine
from app.services.search import SearchEngine
from app.services.visibility import can_read_organization, visibility_clause
from lora_inventory_shared.schemas.common import EntityKind

from .conftest import ALICE, BOB, CAROL, ORG_A, ORG_B, ORG_C


async def test_member_reads_own_org(seeded):
    async with seeded() as session:
        assert await can_read_organization(session, ALICE, ORG_A)
        assert not await can_read_organization(session, ALICE, ORG_B)


async def test_admin_reads_any_org_without_membership(seeded):
    async with seeded() as session:
        for org_id in (ORG_A, ORG_B, ORG_C):
            assert await can_read_organization(session, BOB, org_id)


async def test_membership_change_is_seen_on_next_call(seeded):
    async with seeded() as session:
        assert not await can_read_organization(session, ALICE, ORG_B)

    async with seeded() as session:
        session.add(OrganizationUser(organization_id=ORG_B, user_id=1))
        await session.commit()

    async with seeded() as session:
        assert await can_read_organization(session, ALICE, ORG_B)


async def test_clause_composes_with_other_filters(seeded):
    async with seeded() as session:
        result = await session.execute(
            select(Organization.name)
            .where(visibility_clause(CAROL, Organization.id))
            .where(Organization.name.like("weather%"))
        )
        assert result.scalars().all() == ["weather-co"]


async def test_admin_clause_is_unrestricted(seeded):
    async with seeded() as session:
        result = await session.execute(
            select(Organization.id).where(visibility_clause(BOB, Organization.id))
        )
        assert sorted(result.scalars().all()) == [ORG_A, ORG_B, ORG_C]


async def test_engines_see_membership_change_on_next_call(seeded):
    search = SearchEngine(seeded)
    listing = ListingEngine(seeded)
    assert await search.search(ALICE, "gw-alpha", 10, 0) == []
    assert (await listing.list(ALICE, EntityKind.GATEWAY)).total_count == 1

    async with seeded() as session:
        session.add(OrganizationUser(organization_id=ORG_B, user_id=1))
        await session.commit()

    hits = await search.search(ALICE, "gw-alpha", 10, 0)
    assert [(h.kind, h.organization_id) for h in hits] == [("gateway", ORG_B)]
    page = await listing.list(ALICE, EntityKind.GATEWAY)
    assert page.total_count == 2
    assert await listing.count(ALICE, EntityKind.APPLICATION, ORG_B) == 1
