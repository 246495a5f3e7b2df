"""Authenticated session as seen by route handlers.

Derived per request from headers by a ``SessionProvider``; never persisted
by this service.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """The user a session belongs to."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None = None
    name: str | None = None


class AuthSession(BaseModel):
    """Current request session."""

    id: str
    expires_at: datetime | None = None
    user: SessionUser
