"""
Shared dependencies for the v1 routes: engine lookup, organization
scope check and request deadline.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

import structlog
from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Principal, get_principal
from app.core.database import get_session
from app.services.listing import ListingEngine
from app.services.search import SearchEngine
from app.services.visibility import can_read_organization

log = structlog.get_logger()

T = TypeVar("T")


def get_search_engine(request: Request) -> SearchEngine:
    return request.app.state.search_engine


def get_listing_engine(request: Request) -> ListingEngine:
    return request.app.state.listing_engine


async def with_deadline(request: Request, call: Awaitable[T]) -> T:
    """Await ``call`` under the configured request timeout (0 disables it)."""
    timeout = request.app.state.settings.request_timeout_seconds
    if not timeout:
        return await call
    return await asyncio.wait_for(call, timeout=timeout)


async def require_organization_scope(
    organization_id: Optional[int] = Query(None),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> Optional[int]:
    """Resolve the ``organization_id`` scope; 403 unless the caller may read it."""
    if organization_id is not None and not await can_read_organization(
        session, principal, organization_id
    ):
        log.info("listing.forbidden", organization_id=organization_id)
        raise HTTPException(status_code=403, detail="Not a member of this organization")
    return organization_id
