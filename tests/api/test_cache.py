"""Unit tests for the Redis-list user cache.

No Redis required -- uses an in-memory list double with Redis semantics.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from plura.api.cache import ListCache, UserListCache
from plura.api.models.api import UserResponse

KEY = "users:cache"


class InMemoryListCache:
    """Minimal async stand-in for the Redis list commands."""

    def __init__(self) -> None:
        self.lists: dict[str, list[bytes]] = {}
        self.ttls: dict[str, int] = {}

    async def llen(self, name: str) -> int:
        return len(self.lists.get(name, []))

    async def rpush(self, name: str, *values: str) -> int:
        items = self.lists.setdefault(name, [])
        items.extend(v.encode() for v in values)
        return len(items)

    async def expire(self, name: str, time: int) -> bool:
        if name not in self.lists:
            return False
        self.ttls[name] = time
        return True

    async def lrange(self, name: str, start: int, end: int) -> list[bytes]:
        items = self.lists.get(name, [])
        if start < 0:
            start = max(len(items) + start, 0)
        if end < 0:
            end = len(items) + end
        return items[start : end + 1]


def _user(user_id: str) -> UserResponse:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    return UserResponse(id=user_id, name=user_id.upper(), email=f"{user_id}@example.com", created_at=now, updated_at=now)


class Store:
    """Users u01..uNN ordered by id; records how often it was queried."""

    def __init__(self, count: int) -> None:
        self.users = [_user(f"u{i:02d}") for i in range(1, count + 1)]
        self.calls: list[tuple[str | None, int]] = []

    async def load(self, cursor: str | None, take: int) -> list[UserResponse]:
        self.calls.append((cursor, take))
        await asyncio.sleep(0)
        rows = [u for u in self.users if cursor is None or u.id > cursor]
        return rows[:take]


@pytest.fixture
def backend() -> InMemoryListCache:
    return InMemoryListCache()


@pytest.fixture
def cache(backend: InMemoryListCache) -> UserListCache:
    return UserListCache(backend, key=KEY, ttl=600)


def _ids(users: list[UserResponse]) -> list[str]:
    return [u.id for u in users]


def test_in_memory_double_satisfies_protocol(backend: InMemoryListCache) -> None:
    assert isinstance(backend, ListCache)


async def test_cold_page_seeds_cache(cache: UserListCache, backend: InMemoryListCache) -> None:
    store = Store(25)

    page = await cache.page(None, 10, store.load)

    assert _ids(page.users) == [f"u{i:02d}" for i in range(1, 11)]
    assert page.next_cursor == "u10"
    assert len(backend.lists[KEY]) == 10
    assert backend.ttls[KEY] == 600
    assert store.calls == [(None, 10)]


async def test_warm_page_past_cached_entries_is_empty(cache: UserListCache) -> None:
    store = Store(25)
    await cache.page(None, 10, store.load)

    page = await cache.page("u10", 10, store.load)

    assert page.users == []
    assert page.next_cursor is None
    assert len(store.calls) == 1


async def test_warm_page_starts_after_cursor(cache: UserListCache) -> None:
    store = Store(25)
    await cache.page(None, 10, store.load)

    page = await cache.page("u03", 4, store.load)

    assert _ids(page.users) == ["u04", "u05", "u06", "u07"]
    assert page.next_cursor == "u07"


async def test_short_warm_page_ends_pagination(cache: UserListCache) -> None:
    store = Store(25)
    await cache.page(None, 10, store.load)

    page = await cache.page("u07", 5, store.load)

    assert _ids(page.users) == ["u08", "u09", "u10"]
    assert page.next_cursor is None


async def test_unknown_cursor_restarts_from_first_entry(cache: UserListCache) -> None:
    store = Store(25)
    await cache.page(None, 10, store.load)

    page = await cache.page("zzz", 3, store.load)

    assert _ids(page.users) == ["u01", "u02", "u03"]


async def test_repeated_warm_reads_are_identical(cache: UserListCache) -> None:
    store = Store(25)
    await cache.page(None, 10, store.load)

    first = await cache.page("u02", 3, store.load)
    second = await cache.page("u02", 3, store.load)

    assert first == second


async def test_cold_page_with_cursor_caches_that_page(cache: UserListCache, backend: InMemoryListCache) -> None:
    store = Store(25)

    page = await cache.page("u20", 10, store.load)

    assert _ids(page.users) == ["u21", "u22", "u23", "u24", "u25"]
    assert page.next_cursor is None
    assert len(backend.lists[KEY]) == 5


async def test_empty_store_leaves_cache_empty(cache: UserListCache, backend: InMemoryListCache) -> None:
    store = Store(0)

    page = await cache.page(None, 10, store.load)

    assert page.users == []
    assert page.next_cursor is None
    assert KEY not in backend.lists


async def test_unreadable_entries_are_dropped(cache: UserListCache, backend: InMemoryListCache) -> None:
    await backend.rpush(KEY, _user("u01").model_dump_json(by_alias=True), "{not json", '{"id": "partial"}')
    await backend.rpush(KEY, _user("u02").model_dump_json(by_alias=True))

    page = await cache.page(None, 4, Store(0).load)

    assert _ids(page.users) == ["u01", "u02"]
    assert page.next_cursor is None

    page = await cache.page("u01", 4, Store(0).load)
    assert _ids(page.users) == ["u02"]


async def test_concurrent_cold_reads_duplicate_entries(cache: UserListCache, backend: InMemoryListCache) -> None:
    """Two cold callers both seed the list; duplicates persist until the key expires."""
    store = Store(25)

    first, second = await asyncio.gather(cache.page(None, 10, store.load), cache.page(None, 10, store.load))

    assert _ids(first.users) == _ids(second.users)
    assert len(store.calls) == 2
    assert len(backend.lists[KEY]) == 20
