"""Container-backed fixtures for integration tests.

One PostgreSQL and one Redis container serve the whole run.  The schema is
built by the packaged Alembic migrations, and the engine comes from the
app's own ``create_db_engine`` so tests share the app's pool settings.

Isolation:

- ``db_session`` wraps each test in an outer transaction; commits made by
  managers only release savepoints, and teardown rolls everything back.
- ``redis_client`` clears the users-cache key before and after each test.

Tests needing containers are marked ``@pytest.mark.integration`` and need
Docker; unit tests never touch these fixtures.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import redis.asyncio as aioredis
from alembic import command
from alembic.config import Config
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer

from plura.api.app import create_db_engine
from plura.api.cache import DEFAULT_CACHE_KEY
from plura.api.settings import PluraSettings

ALEMBIC_INI = Path(__file__).parent.parent / "plura" / "api" / "alembic.ini"


@pytest.fixture(scope="session")
def database_url() -> Iterator[str]:
    """URL of a migrated PostgreSQL 17 database (psycopg dialect)."""
    with PostgresContainer("postgres:17", username="plura", password="plura", dbname="plura", driver="psycopg") as pg:
        url = pg.get_connection_url()
        cfg = Config(str(ALEMBIC_INI))
        cfg.set_main_option("sqlalchemy.url", url)
        command.upgrade(cfg, "head")
        yield url


@pytest.fixture(scope="session")
def redis_url() -> Iterator[str]:
    with RedisContainer("redis:7") as r:
        yield f"redis://{r.get_container_host_ip()}:{r.get_exposed_port(6379)}/0"


@pytest.fixture(scope="session")
def async_engine(database_url: str) -> Iterator[AsyncEngine]:
    engine = create_db_engine(PluraSettings(database_url=database_url))
    yield engine
    engine.sync_engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session whose work is rolled back after the test.

    ``expire_on_commit=False`` matches the app's session factory.
    """
    async with async_engine.connect() as conn:
        await conn.begin()
        session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
        yield session
        await session.close()
        await conn.rollback()


@pytest.fixture
async def redis_client(redis_url: str) -> AsyncIterator[aioredis.Redis]:
    """Raw-bytes client, like the app's, with an empty users cache."""
    client = aioredis.from_url(redis_url, decode_responses=False)
    await client.delete(DEFAULT_CACHE_KEY)
    yield client
    await client.delete(DEFAULT_CACHE_KEY)
    await client.aclose()
