"""
Global search across organizations, applications, devices and gateways.

Each entity kind contributes one SELECT:

- inclusion: case-insensitive substring match of the query on the name
  (and, for devices and gateways, on the hex rendering of the EUI/MAC),
  AND the principal's visibility predicate;
- ranking: trigram similarity of the same fields, taking the greater of
  name and hex similarity for devices and gateways.

The four SELECTs are combined with UNION ALL and ordered as one list by
score descending, then kind, then row id, so equal-score hits always
come back in the same order and OFFSET/LIMIT pages compose.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from sqlalchemy import Integer, LargeBinary, String, cast, func, literal_column, null, or_, union_all
from sqlmodel import select

from app.core.auth import Principal
from app.core.errors import require_non_negative, store_errors
from app.models.application import Application
from app.models.device import Device
from app.models.gateway import Gateway
from app.models.organization import Organization
from app.services.filters import icontains
from app.services.visibility import visibility_clause
from lora_inventory_shared.schemas.common import EntityKind
from lora_inventory_shared.schemas.search import (
    ApplicationHit,
    DeviceHit,
    GatewayHit,
    OrganizationHit,
    SearchHit,
)

log = structlog.get_logger()


def _hex(column):
    return func.encode(column, literal_column("'hex'"))


def _kind(kind: EntityKind):
    return literal_column(f"'{kind.value}'", String).label("kind")


def _none(type_, name: str):
    return cast(null(), type_).label(name)


def _device_select(principal: Principal, query: str):
    score = func.greatest(
        func.similarity(Device.name, query),
        func.similarity(_hex(Device.dev_eui), query),
    )
    return (
        select(
            _kind(EntityKind.DEVICE),
            score.label("score"),
            Device.id.label("entity_id"),
            Organization.id.label("organization_id"),
            Organization.name.label("organization_name"),
            Application.id.label("application_id"),
            Application.name.label("application_name"),
            Device.dev_eui.label("device_dev_eui"),
            Device.name.label("device_name"),
            _none(LargeBinary, "gateway_mac"),
            _none(String, "gateway_name"),
        )
        .select_from(Device)
        .join(Application, Application.id == Device.application_id)
        .join(Organization, Organization.id == Application.organization_id)
        .where(
            visibility_clause(principal, Organization.id),
            or_(icontains(Device.name, query), icontains(_hex(Device.dev_eui), query)),
        )
    )


def _gateway_select(principal: Principal, query: str):
    score = func.greatest(
        func.similarity(Gateway.name, query),
        func.similarity(_hex(Gateway.mac), query),
    )
    return (
        select(
            _kind(EntityKind.GATEWAY),
            score.label("score"),
            Gateway.id.label("entity_id"),
            Organization.id.label("organization_id"),
            Organization.name.label("organization_name"),
            _none(Integer, "application_id"),
            _none(String, "application_name"),
            _none(LargeBinary, "device_dev_eui"),
            _none(String, "device_name"),
            Gateway.mac.label("gateway_mac"),
            Gateway.name.label("gateway_name"),
        )
        .select_from(Gateway)
        .join(Organization, Organization.id == Gateway.organization_id)
        .where(
            visibility_clause(principal, Organization.id),
            or_(icontains(Gateway.name, query), icontains(_hex(Gateway.mac), query)),
        )
    )


def _organization_select(principal: Principal, query: str):
    return (
        select(
            _kind(EntityKind.ORGANIZATION),
            func.similarity(Organization.name, query).label("score"),
            Organization.id.label("entity_id"),
            Organization.id.label("organization_id"),
            Organization.name.label("organization_name"),
            _none(Integer, "application_id"),
            _none(String, "application_name"),
            _none(LargeBinary, "device_dev_eui"),
            _none(String, "device_name"),
            _none(LargeBinary, "gateway_mac"),
            _none(String, "gateway_name"),
        )
        .select_from(Organization)
        .where(
            visibility_clause(principal, Organization.id),
            icontains(Organization.name, query),
        )
    )


def _application_select(principal: Principal, query: str):
    return (
        select(
            _kind(EntityKind.APPLICATION),
            func.similarity(Application.name, query).label("score"),
            Application.id.label("entity_id"),
            Organization.id.label("organization_id"),
            Organization.name.label("organization_name"),
            Application.id.label("application_id"),
            Application.name.label("application_name"),
            _none(LargeBinary, "device_dev_eui"),
            _none(String, "device_name"),
            _none(LargeBinary, "gateway_mac"),
            _none(String, "gateway_name"),
        )
        .select_from(Application)
        .join(Organization, Organization.id == Application.organization_id)
        .where(
            visibility_clause(principal, Organization.id),
            icontains(Application.name, query),
        )
    )


def build_search_query(principal: Principal, query: str, limit: int, offset: int):
    """The complete ranked, paginated search statement."""
    hits = union_all(
        _device_select(principal, query),
        _gateway_select(principal, query),
        _organization_select(principal, query),
        _application_select(principal, query),
    ).subquery("hits")
    return (
        select(*hits.c)
        .order_by(hits.c.score.desc(), hits.c.kind.asc(), hits.c.entity_id.asc())
        .limit(limit)
        .offset(offset)
    )


def row_to_hit(row: Mapping[str, Any]) -> SearchHit:
    """Build the typed hit for one row of the union, keyed on its kind."""
    kind = EntityKind(row["kind"])
    common = {
        "score": float(row["score"] or 0.0),
        "organization_id": row["organization_id"],
        "organization_name": row["organization_name"],
    }
    if kind is EntityKind.DEVICE:
        return DeviceHit(
            **common,
            application_id=row["application_id"],
            application_name=row["application_name"],
            dev_eui=bytes(row["device_dev_eui"]).hex(),
            device_name=row["device_name"],
        )
    if kind is EntityKind.GATEWAY:
        return GatewayHit(
            **common,
            mac=bytes(row["gateway_mac"]).hex(),
            gateway_name=row["gateway_name"],
        )
    if kind is EntityKind.APPLICATION:
        return ApplicationHit(
            **common,
            application_id=row["application_id"],
            application_name=row["application_name"],
        )
    return OrganizationHit(**common)


class SearchEngine:
    """Ranked cross-kind search over one store."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def search(
        self, principal: Principal, query: str, limit: int, offset: int = 0
    ) -> list[SearchHit]:
        require_non_negative("search", limit=limit, offset=offset)
        stmt = build_search_query(principal, query, limit, offset)

        async with store_errors("search"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()

        hits = [row_to_hit(row) for row in rows]
        log.info(
            "search.executed",
            username=principal.username,
            global_admin=principal.is_global_admin,
            query_length=len(query),
            limit=limit,
            offset=offset,
            hits=len(hits),
        )
        return hits
