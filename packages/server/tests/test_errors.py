"""
Tests for the error taxonomy and the store boundary mapping.
"""

from __future__ import annotations

import asyncio
import sqlite3

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeout

from app.core.database import create_session_factory, create_store_engine
from app.core.errors import (
    InvalidArgument,
    InventoryError,
    QueryCancelled,
    StoreUnavailable,
    require_non_negative,
    store_errors,
)
from app.services.listing import ListingEngine
from app.services.search import SearchEngine
from lora_inventory_shared.schemas.common import EntityKind

from .conftest import ALICE


class _CanceledByServer(Exception):
    sqlstate = "57014"


class TestStoreErrors:
    async def test_operational_error_becomes_store_unavailable(self):
        with pytest.raises(StoreUnavailable) as exc_info:
            async with store_errors("search"):
                raise OperationalError("SELECT 1", {}, sqlite3.OperationalError("disk I/O error"))
        assert exc_info.value.retryable
        assert exc_info.value.operation == "search"
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_pool_timeout_becomes_store_unavailable(self):
        with pytest.raises(StoreUnavailable):
            async with store_errors("list"):
                raise PoolTimeout("QueuePool limit reached")

    async def test_connection_refused_becomes_store_unavailable(self):
        with pytest.raises(StoreUnavailable):
            async with store_errors("list"):
                raise ConnectionRefusedError(111, "Connection refused")

    async def test_server_side_cancel_becomes_cancelled(self):
        with pytest.raises(QueryCancelled):
            async with store_errors("search"):
                raise DBAPIError("SELECT 1", {}, _CanceledByServer("canceling statement"))

    async def test_task_cancellation_becomes_cancelled(self):
        with pytest.raises(QueryCancelled) as exc_info:
            async with store_errors("search"):
                raise asyncio.CancelledError()
        assert isinstance(exc_info.value, asyncio.CancelledError)
        assert not exc_info.value.retryable

    async def test_cancelled_task_stays_cancelled(self):
        started = asyncio.Event()

        async def slow_query():
            async with store_errors("search"):
                started.set()
                await asyncio.sleep(10)

        task = asyncio.create_task(slow_query())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()

    async def test_taxonomy_errors_pass_through(self):
        with pytest.raises(InvalidArgument):
            async with store_errors("list"):
                raise InvalidArgument("bad", operation="list")

    async def test_unrelated_errors_are_not_wrapped(self):
        with pytest.raises(KeyError):
            async with store_errors("list"):
                raise KeyError("x")


class TestUnreachableStore:
    @pytest.fixture
    def broken_factory(self, tmp_path):
        engine = create_store_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'inventory.db'}"
        )
        return create_session_factory(engine)

    async def test_search(self, broken_factory):
        with pytest.raises(StoreUnavailable):
            await SearchEngine(broken_factory).search(ALICE, "x", 10, 0)

    async def test_list(self, broken_factory):
        with pytest.raises(StoreUnavailable) as exc_info:
            await ListingEngine(broken_factory).list(ALICE, EntityKind.DEVICE)
        assert isinstance(exc_info.value, InventoryError)
        assert exc_info.value.operation == "list"


def test_require_non_negative():
    require_non_negative("list", limit=None, offset=0)
    with pytest.raises(InvalidArgument) as exc_info:
        require_non_negative("list", limit=5, offset=-1)
    assert "offset" in exc_info.value.message
