"""
Device listing.

GET /api/v1/devices?organization_id=&application_id=&search=&limit=&offset=

A scope the caller is not a member of is refused with 403.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.deps import get_listing_engine, require_organization_scope, with_deadline
from app.core.auth import Principal, get_principal
from app.services.listing import ListingEngine
from lora_inventory_shared.schemas.common import EntityKind
from lora_inventory_shared.schemas.listing import DeviceListItem, ListingPage

router = APIRouter()


@router.get("", response_model=ListingPage[DeviceListItem])
async def list_devices(
    request: Request,
    organization_id: Optional[int] = Depends(require_organization_scope),
    application_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    offset: int = Query(0),
    principal: Principal = Depends(get_principal),
    engine: ListingEngine = Depends(get_listing_engine),
):
    return await with_deadline(
        request,
        engine.list(
            principal,
            EntityKind.DEVICE,
            organization_id,
            search,
            limit,
            offset,
            application_id=application_id,
        ),
    )
