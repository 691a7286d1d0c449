"""
Scoped listing schemas: one item model per entity kind plus the page
envelope carrying the total number of matches.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel


class OrganizationListItem(BaseModel):
    id: int
    name: str
    display_name: str
    can_have_gateways: bool

    model_config = {"from_attributes": True}


class ApplicationListItem(BaseModel):
    id: int
    name: str
    description: str
    organization_id: int
    service_profile_id: Optional[int] = None
    service_profile_name: Optional[str] = None

    model_config = {"from_attributes": True}


class DeviceListItem(BaseModel):
    dev_eui: str
    name: str
    description: str
    application_id: int

    model_config = {"from_attributes": True}


class GatewayListItem(BaseModel):
    mac: str
    name: str
    description: str
    organization_id: int

    model_config = {"from_attributes": True}


ItemT = TypeVar("ItemT", bound=BaseModel)


class ListingPage(BaseModel, Generic[ItemT]):
    """A page of same-kind items.

    ``total_count`` is the number of matches before limit/offset are
    applied, computed under the same predicates as ``result``.
    """
    total_count: int
    result: list[ItemT]
