"""FastAPI dependency injection factories for repositories and services.

Each repository factory takes AsyncSession via Depends(get_async_session);
services are assembled from repositories. The acting user comes from the
X-User-Id header, which the upstream auth provider sets after verifying the
session.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import get_async_session
from src.locations.service import LocationService
from src.locations.workspaces import WorkspaceService
from src.repositories.locations import LocationRepository
from src.repositories.workspace import WorkspaceRepository

# ---------------------------------------------------------------------------
# Actor
# ---------------------------------------------------------------------------


async def get_actor_id(
    x_user_id: Annotated[UUID, Header(description="Authenticated user id.")],
) -> UUID:
    return x_user_id


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


async def get_workspace_repo(
    session: AsyncSession = Depends(get_async_session),
) -> WorkspaceRepository:
    return WorkspaceRepository(session)


async def get_location_repo(
    session: AsyncSession = Depends(get_async_session),
) -> LocationRepository:
    return LocationRepository(session)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


async def get_workspace_service(
    repo: WorkspaceRepository = Depends(get_workspace_repo),
) -> WorkspaceService:
    return WorkspaceService(repo)


async def get_location_service(
    repo: LocationRepository = Depends(get_location_repo),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> LocationService:
    return LocationService(repo, workspaces)
