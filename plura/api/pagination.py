"""Shared request-parsing helpers for cursor-paginated listings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class _HasId(Protocol):
    id: str


def parse_take(raw: str | None, default: int) -> int:
    """Parse a ``take`` query value.

    Missing, non-integer and non-positive values all fall back to *default*.
    """
    if raw is None:
        return default
    try:
        take = int(raw.strip())
    except ValueError:
        return default
    return take if take > 0 else default


def full_page_cursor(items: Sequence[_HasId], take: int) -> str | None:
    """Cursor for the next page, only when the current page is full.

    A short page is treated as the end of the listing, even when it is short
    only because fewer than *take* items remained after the cursor.
    """
    if items and len(items) == take:
        return items[-1].id
    return None


def last_item_cursor(items: Sequence[_HasId]) -> str | None:
    """Cursor for the next page whenever the current page is non-empty."""
    return items[-1].id if items else None
