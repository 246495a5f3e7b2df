"""Workspace CRUD operations.

Encapsulates all workspace data access: create, paginated list, list by
owner, get, and owner-scoped delete.
"""

from __future__ import annotations

import uuid

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from plura.api.db.tables import Workspace
from plura.api.models.api import WorkspaceCreate


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is not found (or not owned by the caller)."""


class WorkspaceCreateError(ValueError):
    """Raised when the store rejects a new workspace (e.g. unknown owner)."""


async def create_workspace(db: AsyncSession, body: WorkspaceCreate, user_id: str) -> Workspace:
    """Create a workspace owned by *user_id*.  Raises ``WorkspaceCreateError`` on rejection."""
    workspace = Workspace(id=str(uuid.uuid4()), name=body.name, user_id=user_id)
    db.add(workspace)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise WorkspaceCreateError(user_id) from exc
    await db.refresh(workspace)
    return workspace


async def list_workspaces(db: AsyncSession, *, cursor: str | None = None, take: int = 10) -> list[Workspace]:
    """List workspaces oldest first, strictly after the *cursor* workspace.

    Ties on ``created_at`` are broken by id.  An unknown cursor yields an
    empty page.
    """
    stmt = select(Workspace).order_by(Workspace.created_at.asc(), Workspace.id.asc())

    if cursor:
        anchor = await db.get(Workspace, cursor)
        if anchor is None:
            return []
        stmt = stmt.where(
            or_(
                Workspace.created_at > anchor.created_at,
                and_(Workspace.created_at == anchor.created_at, Workspace.id > anchor.id),
            )
        )

    result = await db.execute(stmt.limit(take))
    return list(result.scalars().all())


async def list_user_workspaces(db: AsyncSession, user_id: str) -> list[Workspace]:
    """All workspaces owned by *user_id*, oldest first."""
    result = await db.execute(
        select(Workspace).where(Workspace.user_id == user_id).order_by(Workspace.created_at.asc(), Workspace.id.asc())
    )
    return list(result.scalars().all())


async def get_workspace(db: AsyncSession, workspace_id: str) -> Workspace:
    """Get a workspace by ID.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


async def delete_workspace(db: AsyncSession, workspace_id: str, owner_id: str) -> Workspace:
    """Delete a workspace only if *owner_id* owns it, returning the deleted row.

    Ownership check and delete are one conditional statement.  Raises
    ``WorkspaceNotFoundError`` if no row matched both id and owner.
    """
    result = await db.execute(
        delete(Workspace)
        .where(Workspace.id == workspace_id, Workspace.user_id == owner_id)
        .returning(Workspace)
    )
    workspace = result.scalar_one_or_none()
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    await db.commit()
    return workspace
