from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from plura.api.errors import register_exception_handlers
from plura.api.log import setup_logging
from plura.api.settings import PluraSettings, get_settings


def create_db_engine(settings: PluraSettings) -> AsyncEngine:
    """Async engine sized from ``PLURA_DB_*``.

    Every handler issues one or two short queries, so a small pool with a
    short checkout timeout fails fast instead of queueing requests.
    """
    url = settings.database_url or ""
    return create_async_engine(
        url.replace("postgresql+asyncpg://", "postgresql+psycopg://"),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, json=settings.log_json)

    logger.info("Plura API starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_db_engine(settings)
        _app.state.db_engine = engine
        # Rows stay readable after commit; handlers serialize them afterwards.
        _app.state.db_session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.info(
            "PostgreSQL: configured (pool_size={}, max_overflow={})", settings.db_pool_size, settings.db_max_overflow
        )
    else:
        logger.warning("PLURA_DATABASE_URL not set -- user and workspace routes will answer 503")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Redis: connected (users cache key={}, ttl={}s)", settings.users_cache_key, settings.users_cache_ttl)
    else:
        logger.warning("PLURA_REDIS_URL not set -- user listing served without cache")

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Plura API shutting down")

    # Close Redis client (returns pooled connections).
    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    # Dispose DB engine (closes all pooled connections).
    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("PostgreSQL: disposed")


app = FastAPI(title="Plura API", lifespan=lifespan)
register_exception_handlers(app)

# ---------------------------------------------------------------------------
# API router -- all resource endpoints live under /v1
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/v1")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# -- Resource routers --------------------------------------------------------
from plura.api.routers.users import router as users_router  # noqa: E402
from plura.api.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(users_router)
api.include_router(workspaces_router)

app.include_router(api)
