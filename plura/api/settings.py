"""Service configuration loaded from PLURA_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class PluraSettings(BaseSettings):
    """Plura API settings.

    All fields are read from environment variables with the ``PLURA_`` prefix.
    For example, ``PLURA_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLURA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit one JSON object per log record (for log shippers) instead of colored text."""

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (psycopg).  Required for every resource route."""

    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: float = 10.0
    """Seconds a request waits for a pooled connection before failing with 500."""

    redis_url: str | None = None
    """Redis connection string.  Optional; backs the ``/user/all`` listing cache."""

    # -- Auth ------------------------------------------------------------------
    session_cookie_name: str = "better-auth.session_token"
    """Cookie carrying the signed session token.  The ``__Secure-`` variant is also accepted."""

    # -- Pagination ------------------------------------------------------------
    default_page_size: int = 10

    users_cache_key: str = "users:cache"
    users_cache_ttl: int = 600
    """Seconds before the cached user list expires."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> PluraSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return PluraSettings()
