"""
API v1 Router

Read-only inventory endpoints. Every route resolves the caller's principal
and returns only rows of organizations visible to it.
"""

from fastapi import APIRouter
from . import applications, devices, gateways, organizations, search

router = APIRouter()

router.include_router(search.router, prefix="/search", tags=["Search"])
router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(applications.router, prefix="/applications", tags=["Applications"])
router.include_router(devices.router, prefix="/devices", tags=["Devices"])
router.include_router(gateways.router, prefix="/gateways", tags=["Gateways"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/search",
            "/organizations",
            "/applications",
            "/devices",
            "/gateways",
        ],
    }
