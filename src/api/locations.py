"""FastAPI location hierarchy endpoints.

POST   /v1/workspaces/{ws}/locations                        — create location
GET    /v1/workspaces/{ws}/locations[?parent_id=]           — top-level or direct children
GET    /v1/workspaces/{ws}/locations/{id}                   — get location
GET    /v1/workspaces/{ws}/locations/{id}/ancestors         — breadcrumb trail
GET    /v1/workspaces/{ws}/locations/{id}/descendants       — whole subtree
PATCH  /v1/workspaces/{ws}/locations/{id}                   — update / rename (cascades)
DELETE /v1/workspaces/{ws}/locations/{id}                   — soft delete (with subtree)

All routes are workspace-scoped and require the X-User-Id header.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from src.api.dependencies import get_actor_id, get_location_service
from src.api.errors import http_error
from src.locations.errors import LocatorError
from src.locations.service import LocationService
from src.models.location import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    Location,
    LocationPatch,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/workspaces", tags=["locations"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateLocationRequest(BaseModel):
    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    parent_id: UUID | None = None


class LocationResponse(BaseModel):
    id: str
    workspace_id: str
    name: str
    description: str | None = None
    path: str
    parent_id: str | None = None
    is_deleted: bool
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _location_response(loc: Location) -> LocationResponse:
    return LocationResponse(
        id=str(loc.location_id),
        workspace_id=str(loc.workspace_id),
        name=loc.name,
        description=loc.description,
        path=loc.path,
        parent_id=str(loc.parent_id) if loc.parent_id else None,
        is_deleted=loc.is_deleted,
        created_at=loc.created_at.isoformat(),
        updated_at=loc.updated_at.isoformat(),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/{workspace_id}/locations", status_code=201, response_model=LocationResponse)
async def create_location(
    workspace_id: UUID,
    body: CreateLocationRequest,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    """Create a location at the top level or under `parent_id`."""
    try:
        loc = await service.create_location(
            workspace_id=workspace_id,
            actor_id=actor_id,
            name=body.name,
            description=body.description,
            parent_id=body.parent_id,
        )
    except LocatorError as exc:
        logger.info("Location not created in %s: %s", workspace_id, exc.code)
        raise http_error(exc) from exc
    return _location_response(loc)


@router.get("/{workspace_id}/locations", response_model=list[LocationResponse])
async def list_locations(
    workspace_id: UUID,
    parent_id: UUID | None = Query(default=None),
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> list[LocationResponse]:
    """List top-level locations, or the direct children of `parent_id`."""
    try:
        locs = await service.list_locations(
            workspace_id=workspace_id, actor_id=actor_id, parent_id=parent_id,
        )
    except LocatorError as exc:
        raise http_error(exc) from exc
    return [_location_response(loc) for loc in locs]


@router.get("/{workspace_id}/locations/{location_id}", response_model=LocationResponse)
async def get_location(
    workspace_id: UUID,
    location_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    try:
        loc = await service.get_location(
            workspace_id=workspace_id, location_id=location_id, actor_id=actor_id,
        )
    except LocatorError as exc:
        raise http_error(exc) from exc
    return _location_response(loc)


@router.get(
    "/{workspace_id}/locations/{location_id}/ancestors",
    response_model=list[LocationResponse],
)
async def list_ancestors(
    workspace_id: UUID,
    location_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> list[LocationResponse]:
    try:
        locs = await service.list_ancestors(
            workspace_id=workspace_id, location_id=location_id, actor_id=actor_id,
        )
    except LocatorError as exc:
        raise http_error(exc) from exc
    return [_location_response(loc) for loc in locs]


@router.get(
    "/{workspace_id}/locations/{location_id}/descendants",
    response_model=list[LocationResponse],
)
async def list_descendants(
    workspace_id: UUID,
    location_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> list[LocationResponse]:
    try:
        locs = await service.list_descendants(
            workspace_id=workspace_id, location_id=location_id, actor_id=actor_id,
        )
    except LocatorError as exc:
        raise http_error(exc) from exc
    return [_location_response(loc) for loc in locs]


@router.patch("/{workspace_id}/locations/{location_id}", response_model=LocationResponse)
async def update_location(
    workspace_id: UUID,
    location_id: UUID,
    body: LocationPatch,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    """Update name and/or description. Renaming rewrites the path of the
    location and of every descendant."""
    try:
        loc = await service.update_location(
            workspace_id=workspace_id,
            location_id=location_id,
            actor_id=actor_id,
            patch=body,
        )
    except LocatorError as exc:
        logger.info("Location %s not updated: %s", location_id, exc.code)
        raise http_error(exc) from exc
    return _location_response(loc)


@router.delete("/{workspace_id}/locations/{location_id}", status_code=204)
async def delete_location(
    workspace_id: UUID,
    location_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    service: LocationService = Depends(get_location_service),
) -> Response:
    """Soft-delete the location together with its subtree."""
    try:
        await service.delete_location(
            workspace_id=workspace_id, location_id=location_id, actor_id=actor_id,
        )
    except LocatorError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)
