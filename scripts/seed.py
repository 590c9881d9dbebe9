"""Seed script — load a demo workspace and location tree.

Creates:
1. A demo user id and a workspace owned by it (Demo Household)
2. A small location hierarchy with Polish names, exercising transliteration:

    Garaż                 root.garaz
      Regał Metalowy      root.garaz.regal_metalowy
        Półka #1          root.garaz.regal_metalowy.polka_1
        Półka #2          root.garaz.regal_metalowy.polka_2
    Piwnica               root.piwnica
      Szafa               root.piwnica.szafa

Idempotent: safe to run multiple times — skips if the demo workspace exists.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
"""

import asyncio
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import WorkspaceRow
from src.locations.service import LocationService
from src.locations.workspaces import WorkspaceService
from src.models.location import Location
from src.models.workspace import Workspace
from src.repositories.locations import LocationRepository
from src.repositories.workspace import WorkspaceRepository

DEMO_WORKSPACE_NAME = "Demo Household"
DEMO_USER_ID = UUID("0190c3a0-0000-7000-8000-000000000001")

# (name, parent name or None), parents listed before children
DEMO_TREE: list[tuple[str, str | None]] = [
    ("Garaż", None),
    ("Regał Metalowy", "Garaż"),
    ("Półka #1", "Regał Metalowy"),
    ("Półka #2", "Regał Metalowy"),
    ("Piwnica", None),
    ("Szafa", "Piwnica"),
]


def _services(session: AsyncSession) -> tuple[WorkspaceService, LocationService]:
    workspaces = WorkspaceService(WorkspaceRepository(session))
    return workspaces, LocationService(LocationRepository(session), workspaces)


async def seed_workspace(session: AsyncSession) -> Workspace:
    """Create the demo workspace owned by DEMO_USER_ID."""
    workspaces, _ = _services(session)
    return await workspaces.create_workspace(
        actor_id=DEMO_USER_ID,
        name=DEMO_WORKSPACE_NAME,
        description="Sample storage hierarchy.",
    )


async def seed_locations(session: AsyncSession, workspace_id: UUID) -> list[Location]:
    """Create DEMO_TREE inside the workspace, in order."""
    _, locations = _services(session)
    created: dict[str, Location] = {}
    for name, parent_name in DEMO_TREE:
        parent = created[parent_name] if parent_name else None
        created[name] = await locations.create_location(
            workspace_id=workspace_id,
            actor_id=DEMO_USER_ID,
            name=name,
            parent_id=parent.location_id if parent else None,
        )
    return list(created.values())


async def seed_demo(session: AsyncSession) -> dict:
    """Seed everything. Returns a summary; `skipped` is True when already seeded."""
    result = await session.execute(
        select(WorkspaceRow).where(
            WorkspaceRow.name == DEMO_WORKSPACE_NAME,
            WorkspaceRow.created_by == DEMO_USER_ID,
        ),
    )
    existing = result.scalars().first()
    if existing is not None:
        return {"skipped": True, "workspace_id": str(existing.workspace_id)}

    ws = await seed_workspace(session)
    locs = await seed_locations(session, ws.workspace_id)
    return {
        "skipped": False,
        "workspace_id": str(ws.workspace_id),
        "paths": [loc.path for loc in locs],
    }


async def _run_seed() -> None:
    """Entry point for standalone execution."""
    from src.db.session import async_session_factory

    async with async_session_factory() as session:
        result = await seed_demo(session)

        if result["skipped"]:
            print("Demo data already seeded. Skipping.")
            print(f"  Workspace: {result['workspace_id']}")
            return

        await session.commit()

        print("Seed complete.")
        print(f"  Workspace: {result['workspace_id']}")
        print(f"  Owner:     {DEMO_USER_ID}")
        for path in result["paths"]:
            print(f"  {path}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
