"""
Database connection and session management.

The engine and session factory are built by ``create_app`` and passed to
the services explicitly; nothing here holds a process-wide handle.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.errors import store_errors
from app.core.trigram import register_sqlite_functions


def create_store_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine; SQLite connections get the pg_trgm stand-ins."""
    engine = create_async_engine(database_url, echo=echo, future=True, pool_pre_ping=True)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            register_sqlite_functions(dbapi_connection)

    return engine


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine):
    """Create all tables (development only — use migrations in production)."""
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def ping(engine: AsyncEngine) -> None:
    """Round-trip ``SELECT 1``; raises StoreUnavailable when the store is down."""
    async with store_errors("ping"):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for read-only database sessions."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
