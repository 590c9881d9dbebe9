"""Location hierarchy service — create, rename, read, and soft-delete.

Keeps three invariants over the persisted location set of a workspace:

- depth: at most MAX_DEPTH segments (the anchor plus 5 levels);
- uniqueness: no two active locations share a path, so siblings whose
  names normalize to the same label conflict;
- prefix consistency: a rename rewrites the renamed node and every
  descendant together, each keeping its own trailing labels.

Uniqueness is checked up front for a readable error, but the partial unique
index is authoritative: an IntegrityError raised while writing is reported
as the same SiblingConflictError.

Stateless; workspace and actor are explicit arguments on every call.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from src.db.tables import LocationRow
from src.locations.errors import (
    DepthExceededError,
    InvalidLocationNameError,
    LocationNotFoundError,
    ParentNotFoundError,
    SiblingConflictError,
)
from src.locations.naming import normalize_name
from src.locations.paths import (
    MAX_DEPTH,
    ancestor_paths,
    build_path,
    last_label,
    parent_path,
    path_depth,
    regenerate_path,
)
from src.locations.workspaces import WorkspaceService
from src.models.common import new_uuid7
from src.models.location import Location, LocationPatch
from src.repositories.locations import LocationRepository

logger = structlog.get_logger(__name__)

# Depth of a top-level location ("root.<label>").
TOP_LEVEL_DEPTH = 2


class LocationService:
    def __init__(
        self,
        repo: LocationRepository,
        workspaces: WorkspaceService,
    ) -> None:
        self._repo = repo
        self._workspaces = workspaces

    # ----- Create -----

    async def create_location(
        self,
        *,
        workspace_id: UUID,
        actor_id: UUID,
        name: str,
        description: str | None = None,
        parent_id: UUID | None = None,
    ) -> Location:
        """Insert a location under `parent_id`, or at the top level.

        Raises:
            InvalidLocationNameError: name has no label-safe characters.
            ParentNotFoundError: parent missing, deleted, or in another workspace.
            DepthExceededError: the new path would be deeper than MAX_DEPTH.
            SiblingConflictError: an active location already has the path.
        """
        await self._workspaces.require_member(workspace_id, actor_id)

        label = _label_for(name)

        parent: LocationRow | None = None
        if parent_id is not None:
            parent = await self._repo.get(workspace_id, parent_id)
            if parent is None:
                raise ParentNotFoundError

        path = build_path(parent.path if parent else None, label)
        if path_depth(path) > MAX_DEPTH:
            raise DepthExceededError

        await self._ensure_path_free(workspace_id, path)

        try:
            row = await self._repo.create(
                location_id=new_uuid7(),
                workspace_id=workspace_id,
                path=path,
                name=name,
                description=description,
            )
        except IntegrityError as exc:
            _log_conflict(workspace_id, path, source="constraint")
            raise SiblingConflictError from exc

        logger.info("location_created", workspace_id=str(workspace_id),
                    location_id=str(row.location_id), path=path,
                    actor_id=str(actor_id))
        return _to_model(row, parent.location_id if parent else None)

    # ----- Update / rename -----

    async def update_location(
        self,
        *,
        workspace_id: UUID,
        location_id: UUID,
        actor_id: UUID,
        patch: LocationPatch,
    ) -> Location:
        """Apply a partial update. A changed name regenerates the path.

        The renamed node keeps its parent; descendants get the new prefix in
        the same unit of work.

        Raises:
            LocationNotFoundError: location missing or deleted.
            InvalidLocationNameError: new name has no label-safe characters.
            SiblingConflictError: a sibling already uses the new label.
        """
        await self._workspaces.require_member(workspace_id, actor_id)

        row = await self._repo.get(workspace_id, location_id)
        if row is None:
            raise LocationNotFoundError

        fields = patch.model_fields_set
        changes: dict[str, object] = {}
        if "description" in fields:
            changes["description"] = patch.description

        old_path = row.path
        new_path = old_path
        if "name" in fields and patch.name is not None and patch.name != row.name:
            new_path = regenerate_path(old_path, patch.name)
            if not last_label(new_path):
                raise InvalidLocationNameError
            changes["name"] = patch.name

        if not changes:
            return await self._with_parent_id(row)

        cascaded = 0
        try:
            if new_path != old_path:
                await self._ensure_path_free(workspace_id, new_path, exclude_id=row.location_id)
                row = await self._repo.update(row, path=new_path, **changes)
                rewritten = await self._repo.rewrite_prefix(workspace_id, old_path, new_path)
                cascaded = len(rewritten)
            else:
                row = await self._repo.update(row, **changes)
        except IntegrityError as exc:
            _log_conflict(workspace_id, new_path, source="constraint")
            raise SiblingConflictError from exc

        if new_path != old_path:
            logger.info("location_renamed", workspace_id=str(workspace_id),
                        location_id=str(location_id), old_path=old_path,
                        new_path=new_path, descendants_rewritten=cascaded,
                        actor_id=str(actor_id))
        else:
            logger.info("location_updated", workspace_id=str(workspace_id),
                        location_id=str(location_id), fields=sorted(changes),
                        actor_id=str(actor_id))
        return await self._with_parent_id(row)

    # ----- Read -----

    async def get_location(
        self, *, workspace_id: UUID, location_id: UUID, actor_id: UUID,
    ) -> Location:
        await self._workspaces.require_member(workspace_id, actor_id)
        row = await self._repo.get(workspace_id, location_id)
        if row is None:
            raise LocationNotFoundError
        return await self._with_parent_id(row)

    async def list_locations(
        self,
        *,
        workspace_id: UUID,
        actor_id: UUID,
        parent_id: UUID | None = None,
    ) -> list[Location]:
        """Top-level locations, or the direct children of `parent_id`."""
        await self._workspaces.require_member(workspace_id, actor_id)

        if parent_id is None:
            rows = await self._repo.list_top_level(workspace_id)
            return [_to_model(r, None) for r in rows]

        parent = await self._repo.get(workspace_id, parent_id)
        if parent is None:
            raise ParentNotFoundError
        child_depth = path_depth(parent.path) + 1
        rows = await self._repo.list_descendants(workspace_id, parent.path)
        return [
            _to_model(r, parent.location_id) for r in rows
            if path_depth(r.path) == child_depth
        ]

    async def list_ancestors(
        self, *, workspace_id: UUID, location_id: UUID, actor_id: UUID,
    ) -> list[Location]:
        """Breadcrumb trail from the top-level location down to the parent."""
        await self._workspaces.require_member(workspace_id, actor_id)
        row = await self._repo.get(workspace_id, location_id)
        if row is None:
            raise LocationNotFoundError

        rows = await self._repo.find_by_paths(workspace_id, ancestor_paths(row.path))
        rows.sort(key=lambda r: path_depth(r.path))
        return await self._with_parent_ids(workspace_id, rows)

    async def list_descendants(
        self, *, workspace_id: UUID, location_id: UUID, actor_id: UUID,
    ) -> list[Location]:
        """Whole subtree below the location, ordered by path."""
        await self._workspaces.require_member(workspace_id, actor_id)
        row = await self._repo.get(workspace_id, location_id)
        if row is None:
            raise LocationNotFoundError

        rows = await self._repo.list_descendants(workspace_id, row.path)
        return await self._with_parent_ids(workspace_id, rows, known=[row])

    # ----- Delete -----

    async def delete_location(
        self, *, workspace_id: UUID, location_id: UUID, actor_id: UUID,
    ) -> int:
        """Soft-delete the location and its subtree. Returns rows marked."""
        await self._workspaces.require_member(workspace_id, actor_id)
        row = await self._repo.get(workspace_id, location_id)
        if row is None:
            logger.warning("location_delete_missing", workspace_id=str(workspace_id),
                           location_id=str(location_id), actor_id=str(actor_id))
            raise LocationNotFoundError

        count = await self._repo.soft_delete_subtree(row)
        logger.info("location_deleted", workspace_id=str(workspace_id),
                    location_id=str(location_id), path=row.path,
                    rows_marked=count, actor_id=str(actor_id))
        return count

    # ----- Internals -----

    async def _ensure_path_free(
        self,
        workspace_id: UUID,
        path: str,
        *,
        exclude_id: UUID | None = None,
    ) -> None:
        if await self._repo.find_by_path(workspace_id, path, exclude_id=exclude_id):
            _log_conflict(workspace_id, path, source="precheck")
            raise SiblingConflictError

    async def _with_parent_id(self, row: LocationRow) -> Location:
        return (await self._with_parent_ids(row.workspace_id, [row]))[0]

    async def _with_parent_ids(
        self,
        workspace_id: UUID,
        rows: list[LocationRow],
        *,
        known: list[LocationRow] | None = None,
    ) -> list[Location]:
        """Resolve parent_id for each row with one batched path lookup."""
        by_path = {r.path: r.location_id for r in (*rows, *(known or []))}
        wanted = {
            parent_path(r.path) for r in rows
            if path_depth(r.path) > TOP_LEVEL_DEPTH
        }
        missing = sorted(wanted - by_path.keys())
        for parent in await self._repo.find_by_paths(workspace_id, missing):
            by_path[parent.path] = parent.location_id

        result = []
        for r in rows:
            parent_id = None
            if path_depth(r.path) > TOP_LEVEL_DEPTH:
                parent_id = by_path.get(parent_path(r.path))
            result.append(_to_model(r, parent_id))
        return result


def _label_for(name: str) -> str:
    label = normalize_name(name)
    if not label:
        raise InvalidLocationNameError
    return label


def _to_model(row: LocationRow, parent_id: UUID | None) -> Location:
    return Location(
        location_id=row.location_id,
        workspace_id=row.workspace_id,
        name=row.name,
        description=row.description,
        path=row.path,
        parent_id=parent_id,
        is_deleted=row.is_deleted,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _log_conflict(workspace_id: UUID, path: str, *, source: str) -> None:
    logger.warning("location_path_conflict", workspace_id=str(workspace_id),
                   path=path, source=source)


