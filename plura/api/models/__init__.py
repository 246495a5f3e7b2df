"""Data models for the Plura API."""

from plura.api.models.api import (
    ApiModel,
    DeletedWorkspaceResponse,
    UserEnvelope,
    UserPageResponse,
    UserResponse,
    WorkspaceCreate,
    WorkspaceEnvelope,
    WorkspaceListResponse,
    WorkspacePageResponse,
    WorkspaceResponse,
)
from plura.api.models.auth import AuthSession, SessionUser

__all__ = [
    # API schemas
    "ApiModel",
    # Auth
    "AuthSession",
    "DeletedWorkspaceResponse",
    "SessionUser",
    "UserEnvelope",
    "UserPageResponse",
    "UserResponse",
    "WorkspaceCreate",
    "WorkspaceEnvelope",
    "WorkspaceListResponse",
    "WorkspacePageResponse",
    "WorkspaceResponse",
]
