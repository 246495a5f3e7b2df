"""User endpoints: current user, cached listing, lookup by id.

Route order matters: ``/self`` and ``/all`` must be declared before ``/{user_id}``.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from plura.api.db.tables import User
from plura.api.deps import DbSession, Sessions, Settings, UsersCache
from plura.api.managers import users as user_manager
from plura.api.models.api import UserEnvelope, UserPageResponse
from plura.api.pagination import parse_take

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/self", response_model=UserEnvelope)
async def get_self(request: Request, db: DbSession, sessions: Sessions) -> dict[str, User]:
    """Return the user behind the current session."""
    session = await sessions.get_session(request.headers)
    if session is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Not logged in")
    try:
        user = await user_manager.get_user(db, session.user.id)
    except user_manager.UserNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found") from None
    return {"user": user}


@router.get("/all", response_model=UserPageResponse)
async def list_users(
    db: DbSession,
    cache: UsersCache,
    settings: Settings,
    cursor: str | None = None,
    take: str | None = None,
) -> UserPageResponse:
    """List users by ascending id, ``take`` per page, after ``cursor``."""
    return await user_manager.list_users(
        db,
        cache,
        cursor=cursor or None,
        take=parse_take(take, settings.default_page_size),
    )


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, db: DbSession) -> dict[str, User]:
    """Get a single user by ID."""
    if not user_id.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="user id is required")
    try:
        user = await user_manager.get_user(db, user_id)
    except user_manager.UserNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found") from None
    return {"user": user}
