"""Workspace endpoints: paginated listing, lookup, per-owner listing,
create and owner-scoped delete.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from loguru import logger

from plura.api.db.tables import Workspace
from plura.api.deps import DbSession, Sessions, Settings
from plura.api.managers import workspaces as workspace_manager
from plura.api.models.api import (
    DeletedWorkspaceResponse,
    WorkspaceCreate,
    WorkspaceEnvelope,
    WorkspaceListResponse,
    WorkspacePageResponse,
)
from plura.api.pagination import last_item_cursor, parse_take

router = APIRouter(prefix="/workspace", tags=["workspace"])


@router.get("/all", response_model=WorkspacePageResponse)
async def list_workspaces(
    request: Request,
    db: DbSession,
    settings: Settings,
    cursor: str | None = None,
    take: str | None = None,
) -> dict | RedirectResponse:
    """List workspaces oldest first.

    Requests without a ``cursor`` query parameter are redirected once to
    ``?cursor=``; an empty cursor means "from the start".
    """
    if "cursor" not in request.query_params:
        return RedirectResponse("?cursor=", status_code=status.HTTP_302_FOUND)

    workspaces = await workspace_manager.list_workspaces(
        db,
        cursor=cursor or None,
        take=parse_take(take, settings.default_page_size),
    )
    return {"workspaces": workspaces, "next_cursor": last_item_cursor(workspaces)}


@router.get("/user/{user_id}", response_model=WorkspaceListResponse)
async def list_user_workspaces(user_id: str, db: DbSession) -> dict[str, list[Workspace]]:
    """All workspaces owned by ``user_id``; 404 when there are none."""
    if not user_id.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="missing user id")
    workspaces = await workspace_manager.list_user_workspaces(db, user_id)
    if not workspaces:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="workspaces not found")
    return {"workspaces": workspaces}


@router.get("/{workspace_id}", response_model=WorkspaceEnvelope)
async def get_workspace(workspace_id: str, db: DbSession) -> dict[str, Workspace]:
    """Get a single workspace by ID."""
    if not workspace_id.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="missing workspace id")
    try:
        workspace = await workspace_manager.get_workspace(db, workspace_id)
    except workspace_manager.WorkspaceNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="workspace not found") from None
    return {"workspace": workspace}


@router.post("/", response_model=WorkspaceEnvelope)
async def create_workspace(
    request: Request,
    body: Annotated[WorkspaceCreate, Form()],
    db: DbSession,
    sessions: Sessions,
) -> dict[str, Workspace]:
    """Create a workspace owned by the session user."""
    session = await sessions.get_session(request.headers)
    if session is None or not session.user.id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="missing user id")
    try:
        workspace = await workspace_manager.create_workspace(db, body, session.user.id)
    except workspace_manager.WorkspaceCreateError:
        logger.warning("Workspace create rejected for user {}", session.user.id)
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="failed to create workspace") from None
    logger.info("Workspace {} created for user {}", workspace.id, workspace.user_id)
    return {"workspace": workspace}


@router.delete("/{workspace_id}", response_model=DeletedWorkspaceResponse)
async def delete_workspace(
    request: Request,
    workspace_id: str,
    db: DbSession,
    sessions: Sessions,
) -> dict[str, Workspace]:
    """Delete a workspace owned by the session user."""
    if not workspace_id.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="missing workspace id")
    session = await sessions.get_session(request.headers)
    if session is None or not session.user.id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    try:
        workspace = await workspace_manager.delete_workspace(db, workspace_id, session.user.id)
    except workspace_manager.WorkspaceNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="workspace not found") from None
    logger.info("Workspace {} deleted by user {}", workspace_id, session.user.id)
    return {"deleted_workspace": workspace}
