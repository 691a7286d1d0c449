"""
Visibility resolver: which organizations' rows a principal may read.

A global admin reads everything. Anyone else reads rows whose owning
organization has a membership for their username. The rule is returned as
a SQL predicate so callers AND it with their own filters inside the same
statement, keeping pagination and counts exact.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, Select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import Principal
from app.core.errors import store_errors
from app.models.organization_user import OrganizationUser
from app.models.user import User


def visible_organization_ids(principal: Principal) -> Select:
    """Sub-select of organization ids the principal is a member of."""
    return (
        select(OrganizationUser.organization_id)
        .join(User, User.id == OrganizationUser.user_id)
        .where(User.username == principal.username)
    )


def visibility_clause(principal: Principal, organization_id_column) -> ColumnElement[bool]:
    """Predicate on ``organization_id_column`` restricting rows to visible orgs."""
    if principal.is_global_admin:
        return true()
    return organization_id_column.in_(visible_organization_ids(principal))


async def can_read_organization(
    session: AsyncSession, principal: Principal, organization_id: int
) -> bool:
    """Membership check for a single organization, read fresh from the store."""
    if principal.is_global_admin:
        return True
    stmt = select(
        visible_organization_ids(principal)
        .where(OrganizationUser.organization_id == organization_id)
        .exists()
    )
    async with store_errors("visibility"):
        result = await session.execute(stmt)
    return bool(result.scalar())
