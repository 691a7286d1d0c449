"""
Principal resolution for the inventory API.

Credentials are issued elsewhere; this module only verifies the bearer JWT
signature, names the user from its claims and loads the global-admin flag
from the user table on every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import Settings
from app.core.database import get_session
from app.core.errors import store_errors
from app.models.user import User

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The identity a query runs for."""

    username: str
    is_global_admin: bool = False


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    username: str,
    settings: Settings,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for ``username``. Used by tooling and tests."""
    now = datetime.now(timezone.utc)
    payload = {
        "username": username,
        "sub": username,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str, settings: Settings) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def username_from_claims(claims: dict) -> str:
    username = claims.get("username") or claims.get("sub")
    if not username or not isinstance(username, str):
        raise ValueError("token carries no username claim")
    return username


# ---------------------------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------------------------

async def _load_principal(username: str, session: AsyncSession) -> Principal:
    async with store_errors("principal"):
        result = await session.execute(
            select(User.is_admin, User.is_active).where(User.username == username)
        )
        row = result.one_or_none()
    if row is None or not row.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return Principal(username=username, is_global_admin=bool(row.is_admin))


async def get_principal(
    request: Request,
    authorization: Optional[str] = Depends(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> Principal:
    """Main authentication dependency: Bearer JWT -> Principal."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")

    token = authorization[7:].strip()
    try:
        claims = decode_jwt(token, request.app.state.settings)
        username = username_from_claims(claims)
    except (jwt.PyJWTError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    principal = await _load_principal(username, session)
    structlog.contextvars.bind_contextvars(
        username=principal.username, global_admin=principal.is_global_admin
    )
    return principal
