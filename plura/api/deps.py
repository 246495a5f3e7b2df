"""FastAPI dependency injection for the store, cache and session provider.

Usage in route handlers::

    @router.get("/self")
    async def get_self(request: Request, db: DbSession, sessions: Sessions) -> UserEnvelope:
        ...

The DB dependency raises HTTP 503 if PLURA_DATABASE_URL is unset.  The
cache is optional: ``UsersCache`` resolves to ``None`` when PLURA_REDIS_URL
is unset and the listing falls back to the store.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from plura.api.auth import DatabaseSessionProvider, SessionProvider
from plura.api.cache import UserListCache
from plura.api.settings import PluraSettings, get_settings


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    The manager functions commit on success.  If the handler raises, the
    session is simply closed and the implicit transaction is rolled back.
    """
    session_factory = getattr(request.app.state, "db_session_factory", None)
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (PLURA_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


def get_redis(request: Request) -> aioredis.Redis | None:
    """Return the shared async Redis client, or ``None`` if not configured.

    Redis connections are pooled internally by redis-py -- no per-request
    lifecycle needed.
    """
    return getattr(request.app.state, "redis", None)


def get_users_cache(
    client: Annotated[aioredis.Redis | None, Depends(get_redis)],
    settings: Annotated[PluraSettings, Depends(get_settings)],
) -> UserListCache | None:
    """Wrap the Redis client in the user-listing cache."""
    if client is None:
        return None
    return UserListCache(client, key=settings.users_cache_key, ttl=settings.users_cache_ttl)


def get_session_provider(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[PluraSettings, Depends(get_settings)],
) -> SessionProvider:
    """Session provider backed by the request's DB session."""
    return DatabaseSessionProvider(db, cookie_name=settings.session_cookie_name)


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

UsersCache = Annotated[UserListCache | None, Depends(get_users_cache)]
"""Annotated dependency: user-listing cache, ``None`` without Redis."""

Sessions = Annotated[SessionProvider, Depends(get_session_provider)]
"""Annotated dependency: resolves the current session from request headers."""

Settings = Annotated[PluraSettings, Depends(get_settings)]
"""Annotated dependency: process settings."""
