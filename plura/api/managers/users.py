"""User read operations.

Users are created and mutated by the auth provider; this module only reads.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from plura.api.cache import UserListCache
from plura.api.db.tables import User
from plura.api.models.api import UserPageResponse, UserResponse
from plura.api.pagination import full_page_cursor


class UserNotFoundError(LookupError):
    """Raised when a user is not found."""


async def get_user(db: AsyncSession, user_id: str) -> User:
    """Get a user by ID.  Raises ``UserNotFoundError`` if missing."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def fetch_users_page(db: AsyncSession, cursor: str | None, take: int) -> list[User]:
    """Up to *take* users ordered by id, strictly after the *cursor* user.

    An unknown cursor yields an empty page.
    """
    stmt = select(User).order_by(User.id.asc())
    if cursor:
        if await db.get(User, cursor) is None:
            return []
        stmt = stmt.where(User.id > cursor)
    result = await db.execute(stmt.limit(take))
    return list(result.scalars().all())


async def list_users(
    db: AsyncSession,
    cache: UserListCache | None,
    *,
    cursor: str | None = None,
    take: int = 10,
) -> UserPageResponse:
    """One page of the user listing, served through *cache* when one is configured."""

    async def load(page_cursor: str | None, page_take: int) -> list[UserResponse]:
        rows = await fetch_users_page(db, page_cursor, page_take)
        return [UserResponse.model_validate(row) for row in rows]

    if cache is not None:
        return await cache.page(cursor, take, load)

    users = await load(cursor, take)
    return UserPageResponse(next_cursor=full_page_cursor(users, take), users=users)
