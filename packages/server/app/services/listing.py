"""
Scoped listing and counting of a single entity kind.

Four scope combinations are served by one code path:

- global admin, no organization     -> every row
- global admin, organization X      -> rows of X
- member, no organization           -> rows of every organization the user belongs to
- member, organization X            -> rows of X, if the user belongs to X

The page and the total count are both derived from ``build_filtered_query``,
so their predicates cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import structlog
from pydantic import BaseModel
from sqlalchemy import Select, func
from sqlmodel import select

from app.core.auth import Principal
from app.core.errors import InvalidArgument, require_non_negative, store_errors
from app.models.application import Application
from app.models.device import Device
from app.models.gateway import Gateway
from app.models.organization import Organization
from app.models.service_profile import ServiceProfile
from app.services.filters import icontains
from app.services.visibility import visibility_clause
from lora_inventory_shared.schemas.common import EntityKind
from lora_inventory_shared.schemas.listing import (
    ApplicationListItem,
    DeviceListItem,
    GatewayListItem,
    ListingPage,
    OrganizationListItem,
)

log = structlog.get_logger()


@dataclass(frozen=True)
class KindQuery:
    """Everything the listing engine needs to know about one entity kind."""

    statement: Select
    organization_id: Any
    name: Any
    id: Any
    item_model: type[BaseModel]
    to_item: Callable[[Mapping[str, Any]], BaseModel]


def _organization_query() -> KindQuery:
    return KindQuery(
        statement=select(
            Organization.id,
            Organization.name,
            Organization.display_name,
            Organization.can_have_gateways,
        ).select_from(Organization),
        organization_id=Organization.id,
        name=Organization.name,
        id=Organization.id,
        item_model=OrganizationListItem,
        to_item=OrganizationListItem.model_validate,
    )


def _application_query() -> KindQuery:
    return KindQuery(
        statement=select(
            Application.id,
            Application.name,
            Application.description,
            Application.organization_id,
            ServiceProfile.id.label("service_profile_id"),
            ServiceProfile.name.label("service_profile_name"),
        )
        .select_from(Application)
        .outerjoin(ServiceProfile, ServiceProfile.id == Application.service_profile_id),
        organization_id=Application.organization_id,
        name=Application.name,
        id=Application.id,
        item_model=ApplicationListItem,
        to_item=ApplicationListItem.model_validate,
    )


def _device_item(row: Mapping[str, Any]) -> DeviceListItem:
    return DeviceListItem(
        dev_eui=bytes(row["dev_eui"]).hex(),
        name=row["name"],
        description=row["description"],
        application_id=row["application_id"],
    )


def _device_query() -> KindQuery:
    return KindQuery(
        statement=select(
            Device.id,
            Device.dev_eui,
            Device.name,
            Device.description,
            Device.application_id,
        )
        .select_from(Device)
        .join(Application, Application.id == Device.application_id),
        organization_id=Application.organization_id,
        name=Device.name,
        id=Device.id,
        item_model=DeviceListItem,
        to_item=_device_item,
    )


def _gateway_item(row: Mapping[str, Any]) -> GatewayListItem:
    return GatewayListItem(
        mac=bytes(row["mac"]).hex(),
        name=row["name"],
        description=row["description"],
        organization_id=row["organization_id"],
    )


def _gateway_query() -> KindQuery:
    return KindQuery(
        statement=select(
            Gateway.id,
            Gateway.mac,
            Gateway.name,
            Gateway.description,
            Gateway.organization_id,
        ).select_from(Gateway),
        organization_id=Gateway.organization_id,
        name=Gateway.name,
        id=Gateway.id,
        item_model=GatewayListItem,
        to_item=_gateway_item,
    )


KIND_QUERIES: dict[EntityKind, Callable[[], KindQuery]] = {
    EntityKind.ORGANIZATION: _organization_query,
    EntityKind.APPLICATION: _application_query,
    EntityKind.DEVICE: _device_query,
    EntityKind.GATEWAY: _gateway_query,
}


def parse_kind(kind: EntityKind | str, operation: str) -> EntityKind:
    try:
        return EntityKind(kind)
    except ValueError:
        raise InvalidArgument(f"unknown entity kind: {kind!r}", operation=operation)


def build_filtered_query(
    principal: Principal,
    kind: EntityKind,
    organization_id: Optional[int] = None,
    search: Optional[str] = None,
    application_id: Optional[int] = None,
) -> tuple[Select, KindQuery]:
    """The unpaginated statement shared by ``list`` and ``count``."""
    query = KIND_QUERIES[kind]()
    stmt = query.statement.where(visibility_clause(principal, query.organization_id))
    if organization_id is not None:
        stmt = stmt.where(query.organization_id == organization_id)
    if application_id is not None:
        stmt = stmt.where(Device.application_id == application_id)
    if search:
        stmt = stmt.where(icontains(query.name, search))
    return stmt, query


def count_statement(filtered: Select) -> Select:
    return select(func.count()).select_from(filtered.subquery())


class ListingEngine:
    """Paginated same-kind listings with matching total counts."""

    def __init__(self, session_factory, *, snapshot_reads: bool = False):
        self._session_factory = session_factory
        self._snapshot_reads = snapshot_reads

    def _prepare(
        self,
        operation: str,
        principal: Principal,
        kind: EntityKind | str,
        organization_id: Optional[int],
        search: Optional[str],
        application_id: Optional[int],
    ) -> tuple[Select, KindQuery]:
        kind = parse_kind(kind, operation)
        if application_id is not None and kind is not EntityKind.DEVICE:
            raise InvalidArgument(
                "application_id scope only applies to devices", operation=operation
            )
        return build_filtered_query(principal, kind, organization_id, search, application_id)

    async def list(
        self,
        principal: Principal,
        kind: EntityKind | str,
        organization_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        *,
        application_id: Optional[int] = None,
    ) -> ListingPage:
        """One page of items plus the total number of matches.

        ``limit=None`` returns every match from ``offset`` on.
        """
        require_non_negative("list", limit=limit, offset=offset)
        filtered, query = self._prepare(
            "list", principal, kind, organization_id, search, application_id
        )
        page_stmt = filtered.order_by(query.name.asc(), query.id.asc()).offset(offset)
        if limit is not None:
            page_stmt = page_stmt.limit(limit)

        async with store_errors("list"):
            async with self._session_factory() as session:
                if self._snapshot_reads and session.bind.dialect.name == "postgresql":
                    await session.connection(
                        execution_options={"isolation_level": "REPEATABLE READ"}
                    )
                rows = (await session.execute(page_stmt)).mappings().all()
                total = (await session.execute(count_statement(filtered))).scalar_one()

        items = [query.to_item(dict(row)) for row in rows]
        log.info(
            "listing.executed",
            kind=EntityKind(kind).value,
            username=principal.username,
            organization_id=organization_id,
            limit=limit,
            offset=offset,
            items=len(items),
            total_count=total,
        )
        return ListingPage[query.item_model](total_count=total, result=items)

    async def count(
        self,
        principal: Principal,
        kind: EntityKind | str,
        organization_id: Optional[int] = None,
        search: Optional[str] = None,
        *,
        application_id: Optional[int] = None,
    ) -> int:
        """Number of rows ``list`` would page over for the same arguments."""
        filtered, _ = self._prepare(
            "count", principal, kind, organization_id, search, application_id
        )
        async with store_errors("count"):
            async with self._session_factory() as session:
                result = await session.execute(count_statement(filtered))
                return result.scalar_one()
