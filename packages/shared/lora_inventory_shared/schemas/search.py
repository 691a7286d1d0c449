"""
Cross-entity search schemas.

A search response is a single ranked list mixing four kinds of hits. Each
hit carries only the fields of its kind, selected by the ``kind`` tag.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class _HitBase(BaseModel):
    score: float = Field(description="Fuzzy similarity of the best matching field")
    organization_id: int
    organization_name: str


class DeviceHit(_HitBase):
    kind: Literal["device"] = "device"
    application_id: int
    application_name: str
    dev_eui: str = Field(description="Device EUI as lower-case hex")
    device_name: str


class GatewayHit(_HitBase):
    kind: Literal["gateway"] = "gateway"
    mac: str = Field(description="Gateway MAC as lower-case hex")
    gateway_name: str


class OrganizationHit(_HitBase):
    kind: Literal["organization"] = "organization"


class ApplicationHit(_HitBase):
    kind: Literal["application"] = "application"
    application_id: int
    application_name: str


SearchHit = Annotated[
    Union[DeviceHit, GatewayHit, OrganizationHit, ApplicationHit],
    Field(discriminator="kind"),
]


class SearchResponse(BaseModel):
    """Ranked hits, highest score first."""
    result: list[SearchHit]
