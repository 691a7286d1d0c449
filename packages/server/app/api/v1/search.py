"""
Global search endpoint.

GET /api/v1/search?search=&limit=&offset=

Ranked hits across organizations, applications, devices and gateways
visible to the caller.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.deps import get_search_engine, with_deadline
from app.core.auth import Principal, get_principal
from app.services.search import SearchEngine
from lora_inventory_shared.schemas.search import SearchResponse

router = APIRouter()


@router.get("", response_model=SearchResponse)
async def global_search(
    request: Request,
    search: str = Query("", description="Free text matched against names and hex identifiers"),
    limit: Optional[int] = Query(None, description="Page size; server default when omitted"),
    offset: int = Query(0),
    principal: Principal = Depends(get_principal),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Search every entity kind at once, best matches first."""
    if limit is None:
        limit = request.app.state.settings.search_default_limit
    hits = await with_deadline(request, engine.search(principal, search, limit, offset))
    return SearchResponse(result=hits)
