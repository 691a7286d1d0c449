"""
Shared fixtures: a temporary SQLite store seeded with three organizations.

    Org A (id=1, "org-alpha")   members: alice, carol
    Org B (id=2, "org-beta")    members: none
    Org C (id=3, "weather-co")  members: carol

bob is a global admin with no memberships; dave is inactive.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.auth import Principal, create_jwt
from app.core.config import Settings
from app.core.database import create_session_factory, create_store_engine, init_db
from app.main import create_app
from app.models import (
    Application,
    Device,
    Gateway,
    Organization,
    OrganizationUser,
    ServiceProfile,
    User,
)

ORG_A, ORG_B, ORG_C = 1, 2, 3

ALICE = Principal(username="alice", is_global_admin=False)
BOB = Principal(username="bob", is_global_admin=True)
CAROL = Principal(username="carol", is_global_admin=False)
NOBODY = Principal(username="nobody", is_global_admin=False)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        secret_key="test-secret",
        log_format="console",
        log_level="warning",
        request_timeout_seconds=5,
    )


@pytest.fixture
async def store_engine(tmp_path):
    engine = create_store_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(store_engine):
    return create_session_factory(store_engine)


@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        session.add_all([
            Organization(id=ORG_A, name="org-alpha", display_name="Org A", can_have_gateways=True),
            Organization(id=ORG_B, name="org-beta", display_name="Org B", can_have_gateways=True),
            Organization(id=ORG_C, name="weather-co", display_name="Org C"),
            User(id=1, username="alice"),
            User(id=2, username="bob", is_admin=True),
            User(id=3, username="carol"),
            User(id=4, username="dave", is_active=False),
        ])
        await session.flush()
        session.add_all([
            OrganizationUser(organization_id=ORG_A, user_id=1),
            OrganizationUser(organization_id=ORG_A, user_id=3, is_admin=True),
            OrganizationUser(organization_id=ORG_C, user_id=3),
            OrganizationUser(organization_id=ORG_A, user_id=4),
            ServiceProfile(id=1, organization_id=ORG_A, name="default-sp"),
        ])
        await session.flush()
        session.add_all([
            Application(id=1, organization_id=ORG_A, name="weather-app", service_profile_id=1),
            Application(id=2, organization_id=ORG_B, name="fleet-tracker"),
            Application(id=3, organization_id=ORG_C, name="soil-monitor"),
        ])
        await session.flush()
        session.add_all([
            Device(id=1, application_id=1, name="sensor-1", dev_eui=bytes.fromhex("0102030405060708")),
            Device(id=2, application_id=2, name="sensor-2", dev_eui=bytes.fromhex("0a0b0c0d0e0f1011")),
            Device(id=3, application_id=3, name="sensor-3", dev_eui=bytes.fromhex("1112131415161718")),
            Gateway(id=1, organization_id=ORG_B, name="gw-alpha", mac=bytes.fromhex("aabbccddeeff0011")),
            Gateway(id=2, organization_id=ORG_A, name="gateway1", mac=bytes.fromhex("0000000000000001")),
        ])
        await session.commit()
    return session_factory


@pytest.fixture
def app(test_settings, store_engine):
    return create_app(test_settings, engine=store_engine)


@pytest.fixture
async def client(app, seeded):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def token_for(test_settings):
    def _token(username: str) -> dict:
        return {"Authorization": f"Bearer {create_jwt(username, test_settings)}"}
    return _token
