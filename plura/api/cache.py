"""Redis-list backed cache for the user listing.

The whole user listing shares one Redis list (``users:cache`` by default).
Each element is a JSON snapshot of a user.  The list is seeded lazily with
whichever page misses first and is only refreshed when its TTL runs out, so
it is a short-lived copy, never a source of truth.

Known limitations, kept on purpose:

- Only the first cold page is ever cached.  Later pages are served from the
  cache and come back short or empty once the cached entries run out.
- Concurrent cold requests can both see an empty list and both append,
  leaving duplicate entries until the key expires.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

from loguru import logger
from pydantic import ValidationError

from plura.api.models.api import UserPageResponse, UserResponse
from plura.api.pagination import full_page_cursor

DEFAULT_CACHE_KEY = "users:cache"
DEFAULT_CACHE_TTL = 600

PageLoader = Callable[[str | None, int], Awaitable[Sequence[UserResponse]]]
"""``(cursor, take) -> users`` with ids strictly greater than *cursor*, ascending."""


@runtime_checkable
class ListCache(Protocol):
    """The list subset of a key-value store that the user cache relies on.

    ``redis.asyncio.Redis`` satisfies this protocol structurally.  Values may
    come back as ``bytes`` or ``str`` depending on ``decode_responses``.
    """

    async def llen(self, name: str) -> int: ...

    async def rpush(self, name: str, *values: str) -> int: ...

    async def expire(self, name: str, time: int) -> bool: ...

    async def lrange(self, name: str, start: int, end: int) -> list[bytes | str]: ...


class UserListCache:
    """Cursor pagination over the shared user list."""

    def __init__(self, cache: ListCache, *, key: str = DEFAULT_CACHE_KEY, ttl: int = DEFAULT_CACHE_TTL) -> None:
        self._cache = cache
        self._key = key
        self._ttl = ttl

    @property
    def key(self) -> str:
        return self._key

    async def page(self, cursor: str | None, take: int, loader: PageLoader) -> UserPageResponse:
        """Return one page of users, seeding the cache from *loader* when it is empty."""
        users: list[UserResponse] = []

        length = await self._cache.llen(self._key)
        if not length:
            users = list(await loader(cursor, take))
            for user in users:
                await self._cache.rpush(self._key, user.model_dump_json(by_alias=True))
            await self._cache.expire(self._key, self._ttl)
            logger.debug("User cache miss: seeded {} with {} users (ttl={}s)", self._key, len(users), self._ttl)

        if not users:
            start = await self._index_after(cursor) if cursor else 0
            raw = await self._cache.lrange(self._key, start, start + take - 1)
            users = [user for user in map(self._decode, raw) if user is not None]
            logger.debug("User cache hit: {} users from index {}", len(users), start)

        return UserPageResponse(next_cursor=full_page_cursor(users, take), users=users)

    async def _index_after(self, cursor: str) -> int:
        """Index just past the entry with id *cursor*; 0 if it is not cached."""
        entries = await self._cache.lrange(self._key, 0, -1)
        for index, raw in enumerate(entries):
            user = self._decode(raw)
            if user is not None and user.id == cursor:
                return index + 1
        return 0

    def _decode(self, raw: bytes | str) -> UserResponse | None:
        try:
            return UserResponse.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Dropping unreadable entry in {}: {}", self._key, exc.errors(include_url=False))
            return None
