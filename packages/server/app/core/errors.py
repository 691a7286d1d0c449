"""
Error taxonomy for the search and listing engines.

Every failure leaving a service is one of the kinds below; driver and
SQLAlchemy exceptions are translated by ``store_errors`` at the boundary.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

log = structlog.get_logger()

# PostgreSQL SQLSTATE for query_canceled (statement_timeout, pg_cancel_backend)
PG_QUERY_CANCELED = "57014"


class InventoryError(Exception):
    """Base class for errors surfaced by the inventory core."""

    retryable = False

    def __init__(self, message: str, *, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation


class InvalidArgument(InventoryError):
    """Caller supplied a negative limit/offset or an unknown entity kind."""


class StoreUnavailable(InventoryError):
    """The store could not be reached or rejected the query."""

    retryable = True


class QueryCancelled(InventoryError, asyncio.CancelledError):
    """The caller withdrew the request before it completed.

    Also an ``asyncio.CancelledError`` so task cancellation keeps working
    for ``asyncio.wait_for`` and task groups further up the stack.
    """


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # asyncpg exposes .sqlstate, psycopg exposes .pgcode
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Translate store failures raised inside the block into InventoryError kinds."""
    try:
        yield
    except InventoryError:
        raise
    except asyncio.CancelledError as exc:
        log.info("query.cancelled", operation=operation)
        raise QueryCancelled(f"{operation} cancelled", operation=operation) from exc
    except DBAPIError as exc:
        if _sqlstate(exc) == PG_QUERY_CANCELED:
            log.info("query.cancelled", operation=operation, source="store")
            raise QueryCancelled(
                f"{operation} cancelled by the store", operation=operation
            ) from exc
        log.warning("store.unavailable", operation=operation, error=type(exc.orig).__name__)
        raise StoreUnavailable(f"{operation} failed: store error", operation=operation) from exc
    except (SQLAlchemyError, OSError) as exc:
        log.warning("store.unavailable", operation=operation, error=type(exc).__name__)
        raise StoreUnavailable(f"{operation} failed: store unreachable", operation=operation) from exc


def require_non_negative(operation: str, **values: int | None) -> None:
    """Reject negative pagination parameters; ``None`` means unbounded."""
    for name, value in values.items():
        if value is not None and value < 0:
            raise InvalidArgument(f"{name} must be >= 0, got {value}", operation=operation)
