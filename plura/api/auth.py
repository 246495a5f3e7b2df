"""Session resolution for authenticated routes.

Route handlers ask a ``SessionProvider`` for the current session given the
request headers.  The default provider looks the session token up in the
``sessions`` table written by the auth service's sign-in flow.

The token is taken from ``Authorization: Bearer <token>`` first, then from
the session cookie.  Cookie values are signed as ``<token>.<signature>``;
only the token part is used for lookup.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from http.cookies import CookieError, SimpleCookie
from typing import Protocol, runtime_checkable
from urllib.parse import unquote

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from plura.api.db.tables import Session, User
from plura.api.models.auth import AuthSession, SessionUser

SECURE_COOKIE_PREFIX = "__Secure-"


@runtime_checkable
class SessionProvider(Protocol):
    """Anything that can turn request headers into the current session."""

    async def get_session(self, headers: Mapping[str, str]) -> AuthSession | None: ...


def extract_session_token(headers: Mapping[str, str], cookie_name: str) -> str | None:
    """Return the raw session token carried by *headers*, if any."""
    authorization = headers.get("authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

    cookie_header = headers.get("cookie")
    if not cookie_header:
        return None
    cookies = SimpleCookie()
    try:
        cookies.load(cookie_header)
    except CookieError:
        logger.debug("Ignoring malformed Cookie header")
        return None

    for name in (cookie_name, SECURE_COOKIE_PREFIX + cookie_name):
        morsel = cookies.get(name)
        if morsel is None or not morsel.value:
            continue
        value = unquote(morsel.value)
        token, sep, _signature = value.rpartition(".")
        return token if sep else value
    return None


class DatabaseSessionProvider:
    """Resolve sessions from the ``sessions`` table."""

    def __init__(self, db: AsyncSession, *, cookie_name: str) -> None:
        self._db = db
        self._cookie_name = cookie_name

    async def get_session(self, headers: Mapping[str, str]) -> AuthSession | None:
        token = extract_session_token(headers, self._cookie_name)
        if token is None:
            return None

        result = await self._db.execute(
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.token == token, Session.expires_at > datetime.now(UTC))
        )
        row = result.first()
        if row is None:
            return None

        session, user = row
        return AuthSession(id=session.id, expires_at=session.expires_at, user=SessionUser.model_validate(user))
