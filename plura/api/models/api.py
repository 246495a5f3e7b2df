"""API request / response schemas for the user and workspace endpoints.

These thin schemas sit between HTTP and the ORM layer:

- **Create** schemas validate user input (form bodies).
- **Response** schemas serialize ORM rows via ``from_attributes``.
- **Envelope** schemas wrap results in the keyed JSON objects clients expect
  (``{"user": ...}``, ``{"workspaces": [...], "nextCursor": ...}``).

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, readable from ORM attributes."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class UserResponse(ApiModel):
    """Serialized user returned to clients (and snapshotted into the list cache)."""

    id: str
    name: str
    email: str
    email_verified: bool = False
    image: str | None = None
    created_at: datetime
    updated_at: datetime


class UserEnvelope(ApiModel):
    user: UserResponse


class UserPageResponse(ApiModel):
    """One page of the user listing.

    ``next_cursor`` is the last user's id when the page is full, else ``None``.
    """

    next_cursor: str | None = None
    users: list[UserResponse]


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(BaseModel):
    """Form input for creating a workspace.  The owner comes from the session."""

    name: str = Field(min_length=1)


class WorkspaceResponse(ApiModel):
    """Serialized workspace returned to clients."""

    id: str
    name: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class WorkspaceEnvelope(ApiModel):
    workspace: WorkspaceResponse


class WorkspaceListResponse(ApiModel):
    workspaces: list[WorkspaceResponse]


class WorkspacePageResponse(ApiModel):
    """One page of the workspace listing.

    ``next_cursor`` is the last workspace's id whenever the page is non-empty.
    """

    workspaces: list[WorkspaceResponse]
    next_cursor: str | None = None


class DeletedWorkspaceResponse(ApiModel):
    deleted_workspace: WorkspaceResponse
