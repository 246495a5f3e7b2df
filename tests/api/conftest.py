"""Shared fixtures for API integration tests."""

from __future__ import annotations

import secrets
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta

import pytest
import redis.asyncio as aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from plura.api.app import app
from plura.api.cache import UserListCache
from plura.api.db.tables import Session, User
from plura.api.deps import get_db, get_users_cache

MakeUser = Callable[..., Awaitable[User]]
SignIn = Callable[..., Awaitable[dict[str, str]]]


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a test DB session and no cache.

    Overrides ``get_db`` so every request uses the savepoint-isolated
    ``db_session`` fixture from the root conftest.  The app lifespan does
    NOT run under ``ASGITransport``, so state fields are pre-set to None.
    """

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.redis = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def cached_client(client: AsyncClient, redis_client: aioredis.Redis) -> AsyncClient:
    """Same as ``client`` but with the user listing served through Redis."""
    app.dependency_overrides[get_users_cache] = lambda: UserListCache(redis_client)
    return client


@pytest.fixture
def make_user(db_session: AsyncSession) -> MakeUser:
    """Factory inserting a user row (normally written by the auth service)."""

    async def _make(user_id: str | None = None, **fields: object) -> User:
        user_id = user_id or str(uuid.uuid4())
        user = User(
            id=user_id,
            name=fields.pop("name", f"User {user_id}"),
            email=fields.pop("email", f"{user_id}@example.com"),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def sign_in(db_session: AsyncSession) -> SignIn:
    """Factory inserting a session row and returning matching auth headers."""

    async def _sign_in(user_id: str, *, expires_in: timedelta = timedelta(days=7)) -> dict[str, str]:
        token = secrets.token_urlsafe(24)
        db_session.add(
            Session(
                id=str(uuid.uuid4()),
                token=token,
                user_id=user_id,
                expires_at=datetime.now(UTC) + expires_in,
            )
        )
        await db_session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _sign_in
