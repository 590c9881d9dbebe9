"""Location repository — persistence for the path hierarchy.

Every read goes through `_active()`, so soft-deleted rows never take part
in lookups, prefix queries, or conflict checks.

Repositories call add()/flush()/refresh() only — never commit(). An
IntegrityError from the partial unique index on (workspace_id, path)
surfaces from flush() and is left for the service to classify.
"""

from uuid import UUID

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import LocationRow
from src.locations.paths import ANCHOR, descendant_prefix, replace_prefix
from src.models.common import utc_now

_UNSET = object()


def _active(workspace_id: UUID) -> tuple[ColumnElement[bool], ...]:
    """Predicate selecting non-deleted rows of one workspace."""
    return (
        LocationRow.workspace_id == workspace_id,
        LocationRow.is_deleted.is_(False),
    )


class LocationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        location_id: UUID,
        workspace_id: UUID,
        path: str,
        name: str,
        description: str | None = None,
    ) -> LocationRow:
        now = utc_now()
        row = LocationRow(
            location_id=location_id,
            workspace_id=workspace_id,
            path=path,
            name=name,
            description=description,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get(self, workspace_id: UUID, location_id: UUID) -> LocationRow | None:
        result = await self._session.execute(
            select(LocationRow).where(
                LocationRow.location_id == location_id,
                *_active(workspace_id),
            ),
        )
        return result.scalar_one_or_none()

    async def list_by_workspace(self, workspace_id: UUID) -> list[LocationRow]:
        result = await self._session.execute(
            select(LocationRow)
            .where(*_active(workspace_id))
            .order_by(LocationRow.path),
        )
        return list(result.scalars().all())

    async def list_top_level(self, workspace_id: UUID) -> list[LocationRow]:
        """Active rows directly under the anchor, ordered by path."""
        prefix = descendant_prefix(ANCHOR)
        result = await self._session.execute(
            select(LocationRow)
            .where(
                LocationRow.path.startswith(prefix, autoescape=True),
                ~LocationRow.path.like(f"{prefix}%.%"),
                *_active(workspace_id),
            )
            .order_by(LocationRow.path),
        )
        return list(result.scalars().all())

    async def find_by_path(
        self,
        workspace_id: UUID,
        path: str,
        *,
        exclude_id: UUID | None = None,
    ) -> list[LocationRow]:
        """Active rows with exactly this path (at most one while the index holds)."""
        stmt = select(LocationRow).where(
            LocationRow.path == path,
            *_active(workspace_id),
        )
        if exclude_id is not None:
            stmt = stmt.where(LocationRow.location_id != exclude_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_paths(
        self, workspace_id: UUID, paths: list[str],
    ) -> list[LocationRow]:
        if not paths:
            return []
        result = await self._session.execute(
            select(LocationRow).where(
                LocationRow.path.in_(paths),
                *_active(workspace_id),
            ),
        )
        return list(result.scalars().all())

    async def list_descendants(
        self, workspace_id: UUID, path: str,
    ) -> list[LocationRow]:
        """Active rows strictly below `path`, ordered by path."""
        result = await self._session.execute(
            select(LocationRow)
            .where(
                LocationRow.path.startswith(descendant_prefix(path), autoescape=True),
                *_active(workspace_id),
            )
            .order_by(LocationRow.path),
        )
        return list(result.scalars().all())

    async def update(
        self,
        row: LocationRow,
        *,
        name: str | None = None,
        path: str | None = None,
        description: object = _UNSET,
    ) -> LocationRow:
        """Only name, path, and description are mutable."""
        if name is not None:
            row.name = name
        if path is not None:
            row.path = path
        if description is not _UNSET:
            row.description = description  # type: ignore[assignment]
        row.updated_at = utc_now()
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def rewrite_prefix(
        self, workspace_id: UUID, old_path: str, new_path: str,
    ) -> list[LocationRow]:
        """Move every active descendant of `old_path` under `new_path`.

        Only the prefix changes; each row keeps its own trailing labels.
        Returns the rewritten rows.
        """
        rows = await self.list_descendants(workspace_id, old_path)
        now = utc_now()
        for row in rows:
            row.path = replace_prefix(row.path, old_path, new_path)
            row.updated_at = now
        await self._session.flush()
        return rows

    async def soft_delete_subtree(self, row: LocationRow) -> int:
        """Mark `row` and all of its active descendants deleted.

        Returns the number of rows marked, `row` included.
        """
        descendants = await self.list_descendants(row.workspace_id, row.path)
        now = utc_now()
        for target in (row, *descendants):
            target.is_deleted = True
            target.updated_at = now
        await self._session.flush()
        return 1 + len(descendants)
