"""FastAPI workspace endpoints.

POST /v1/workspaces                            — create workspace (actor becomes owner)
GET  /v1/workspaces                            — workspaces the actor belongs to
GET  /v1/workspaces/{workspace_id}             — get workspace (members only)
GET  /v1/workspaces/{workspace_id}/members     — list members (members only)
POST /v1/workspaces/{workspace_id}/members     — add member (owner/admin only)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.dependencies import get_actor_id, get_workspace_service
from src.api.errors import http_error
from src.locations.errors import LocatorError
from src.locations.workspaces import WorkspaceService
from src.models.common import MemberRole
from src.models.workspace import Workspace, WorkspaceMember

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/workspaces", tags=["workspaces"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateWorkspaceRequest(BaseModel):
    model_config = {"str_strip_whitespace": True}

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)


class WorkspaceResponse(BaseModel):
    workspace_id: str
    name: str
    description: str
    created_by: str
    created_at: str
    updated_at: str


class AddMemberRequest(BaseModel):
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER


class MemberResponse(BaseModel):
    member_id: str
    workspace_id: str
    user_id: str
    role: str
    created_at: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _workspace_response(ws: Workspace) -> WorkspaceResponse:
    return WorkspaceResponse(
        workspace_id=str(ws.workspace_id),
        name=ws.name,
        description=ws.description,
        created_by=str(ws.created_by),
        created_at=ws.created_at.isoformat(),
        updated_at=ws.updated_at.isoformat(),
    )


def _member_response(member: WorkspaceMember) -> MemberResponse:
    return MemberResponse(
        member_id=str(member.member_id),
        workspace_id=str(member.workspace_id),
        user_id=str(member.user_id),
        role=member.role.value,
        created_at=member.created_at.isoformat(),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("", status_code=201, response_model=WorkspaceResponse)
async def create_workspace(
    body: CreateWorkspaceRequest,
    actor_id: UUID = Depends(get_actor_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    ws = await service.create_workspace(
        actor_id=actor_id, name=body.name, description=body.description,
    )
    return _workspace_response(ws)


@router.get("", response_model=list[WorkspaceResponse])
async def list_workspaces(
    actor_id: UUID = Depends(get_actor_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> list[WorkspaceResponse]:
    return [_workspace_response(ws) for ws in await service.list_workspaces(actor_id=actor_id)]


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    try:
        ws = await service.get_workspace(workspace_id=workspace_id, actor_id=actor_id)
    except LocatorError as exc:
        raise http_error(exc) from exc
    return _workspace_response(ws)


@router.post("/{workspace_id}/members", status_code=201, response_model=MemberResponse)
async def add_member(
    workspace_id: UUID,
    body: AddMemberRequest,
    actor_id: UUID = Depends(get_actor_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> MemberResponse:
    """Add a user to the workspace with the given role."""
    try:
        member: WorkspaceMember = await service.add_member(
            workspace_id=workspace_id, actor_id=actor_id,
            user_id=body.user_id, role=body.role,
        )
    except LocatorError as exc:
        logger.info("Member not added to %s: %s", workspace_id, exc)
        raise http_error(exc) from exc

    return _member_response(member)


@router.get("/{workspace_id}/members", response_model=list[MemberResponse])
async def list_members(
    workspace_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> list[MemberResponse]:
    try:
        members = await service.list_members(workspace_id=workspace_id, actor_id=actor_id)
    except LocatorError as exc:
        raise http_error(exc) from exc
    return [_member_response(m) for m in members]
