"""
Organization listing.

GET /api/v1/organizations?search=&limit=&offset=

Global admins see all organizations, everyone else the organizations they
are a member of.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.deps import get_listing_engine, with_deadline
from app.core.auth import Principal, get_principal
from app.services.listing import ListingEngine
from lora_inventory_shared.schemas.common import EntityKind
from lora_inventory_shared.schemas.listing import ListingPage, OrganizationListItem

router = APIRouter()


@router.get("", response_model=ListingPage[OrganizationListItem])
async def list_organizations(
    request: Request,
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    offset: int = Query(0),
    principal: Principal = Depends(get_principal),
    engine: ListingEngine = Depends(get_listing_engine),
):
    return await with_deadline(
        request,
        engine.list(principal, EntityKind.ORGANIZATION, None, search, limit, offset),
    )
