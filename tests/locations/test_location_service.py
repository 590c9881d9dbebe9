"""Tests for LocationService against the SQLite test database.

Covers: create (top-level, nested, depth limit, sibling conflicts, invalid
names, bad parents), rename with cascade, description updates, listing,
ancestors/descendants, soft delete, and the workspace membership gate.
"""

from uuid import UUID

import pytest

from src.db.tables import LocationRow
from src.locations.errors import (
    DepthExceededError,
    InvalidLocationNameError,
    LocationNotFoundError,
    ParentNotFoundError,
    SiblingConflictError,
    WorkspaceMembershipError,
    WorkspaceNotFoundError,
)
from src.locations.paths import MAX_DEPTH, path_depth
from src.locations.service import LocationService
from src.models.common import MemberRole, new_uuid7
from src.models.location import Location, LocationPatch


async def _create(
    service: LocationService,
    workspace_id: UUID,
    actor_id: UUID,
    name: str,
    parent: Location | None = None,
    **kwargs,
) -> Location:
    return await service.create_location(
        workspace_id=workspace_id,
        actor_id=actor_id,
        name=name,
        parent_id=parent.location_id if parent else None,
        **kwargs,
    )


async def _chain(
    service: LocationService, workspace_id: UUID, actor_id: UUID, names: list[str],
) -> list[Location]:
    created: list[Location] = []
    for name in names:
        created.append(
            await _create(service, workspace_id, actor_id, name,
                          created[-1] if created else None),
        )
    return created


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateLocation:
    @pytest.mark.anyio
    async def test_top_level(self, location_service, workspace_id, owner_id) -> None:
        loc = await _create(location_service, workspace_id, owner_id, "Garaż Metalowy",
                            description="Blue door")
        assert loc.path == "root.garaz_metalowy"
        assert loc.name == "Garaż Metalowy"
        assert loc.description == "Blue door"
        assert loc.parent_id is None
        assert loc.is_deleted is False
        assert loc.workspace_id == workspace_id

    @pytest.mark.anyio
    async def test_nested(self, location_service, workspace_id, owner_id) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf A", garage)
        assert shelf.path == "root.garage.shelf_a"
        assert shelf.parent_id == garage.location_id

    @pytest.mark.anyio
    async def test_max_depth_allowed(self, location_service, workspace_id, owner_id) -> None:
        chain = await _chain(location_service, workspace_id, owner_id, ["a", "b", "c", "d", "e"])
        assert chain[-1].path == "root.a.b.c.d.e"

    @pytest.mark.anyio
    async def test_depth_exceeded(self, location_service, workspace_id, owner_id) -> None:
        chain = await _chain(location_service, workspace_id, owner_id, ["a", "b", "c", "d", "e"])
        with pytest.raises(DepthExceededError):
            await _create(location_service, workspace_id, owner_id, "f", chain[-1])

    @pytest.mark.anyio
    async def test_sibling_conflict_after_normalization(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        await _create(location_service, workspace_id, owner_id, "Shelf")
        with pytest.raises(SiblingConflictError):
            await _create(location_service, workspace_id, owner_id, "SHELF ")

    @pytest.mark.anyio
    async def test_same_label_under_different_parents(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        cellar = await _create(location_service, workspace_id, owner_id, "Cellar")
        a = await _create(location_service, workspace_id, owner_id, "Shelf", garage)
        b = await _create(location_service, workspace_id, owner_id, "Shelf", cellar)
        assert a.path != b.path

    @pytest.mark.anyio
    async def test_same_path_in_other_workspace(
        self, location_service, workspace_service, workspace_id, owner_id,
    ) -> None:
        other = await workspace_service.create_workspace(actor_id=owner_id, name="Office")
        a = await _create(location_service, workspace_id, owner_id, "Garage")
        b = await _create(location_service, other.workspace_id, owner_id, "Garage")
        assert a.path == b.path == "root.garage"

    @pytest.mark.anyio
    @pytest.mark.parametrize("name", ["!!!", "###", "Кухня"])
    async def test_name_without_label_characters(
        self, location_service, workspace_id, owner_id, name,
    ) -> None:
        with pytest.raises(InvalidLocationNameError):
            await _create(location_service, workspace_id, owner_id, name)

    @pytest.mark.anyio
    async def test_unknown_parent(self, location_service, workspace_id, owner_id) -> None:
        with pytest.raises(ParentNotFoundError):
            await location_service.create_location(
                workspace_id=workspace_id, actor_id=owner_id,
                name="Shelf", parent_id=new_uuid7(),
            )

    @pytest.mark.anyio
    async def test_deleted_parent(self, location_service, workspace_id, owner_id) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        await location_service.delete_location(
            workspace_id=workspace_id, location_id=garage.location_id, actor_id=owner_id,
        )
        with pytest.raises(ParentNotFoundError):
            await _create(location_service, workspace_id, owner_id, "Shelf", garage)

    @pytest.mark.anyio
    async def test_parent_from_other_workspace(
        self, location_service, workspace_service, workspace_id, owner_id,
    ) -> None:
        other = await workspace_service.create_workspace(actor_id=owner_id, name="Office")
        foreign = await _create(location_service, other.workspace_id, owner_id, "Desk")
        with pytest.raises(ParentNotFoundError):
            await _create(location_service, workspace_id, owner_id, "Drawer", foreign)

    @pytest.mark.anyio
    async def test_expanding_names_fit_path_column(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        chain = await _chain(location_service, workspace_id, owner_id, ["ß" * 255] * 5)
        deepest = chain[-1].path
        assert path_depth(deepest) == MAX_DEPTH
        assert len(deepest) <= LocationRow.__table__.c.path.type.length

    @pytest.mark.anyio
    async def test_parent_not_found_is_a_not_found(self) -> None:
        assert issubclass(ParentNotFoundError, LocationNotFoundError)


# ---------------------------------------------------------------------------
# Update / rename
# ---------------------------------------------------------------------------


class TestUpdateLocation:
    @pytest.mark.anyio
    async def test_rename_cascades_to_descendants(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        garage, shelf, box = await _chain(
            location_service, workspace_id, owner_id, ["Garage", "Shelf A", "Box 1"],
        )
        renamed = await location_service.update_location(
            workspace_id=workspace_id, location_id=garage.location_id,
            actor_id=owner_id, patch=LocationPatch(name="Warehouse"),
        )
        assert renamed.path == "root.warehouse"
        assert renamed.name == "Warehouse"

        descendants = await location_service.list_descendants(
            workspace_id=workspace_id, location_id=garage.location_id, actor_id=owner_id,
        )
        assert [d.path for d in descendants] == [
            "root.warehouse.shelf_a",
            "root.warehouse.shelf_a.box_1",
        ]
        assert descendants[0].location_id == shelf.location_id
        assert descendants[1].parent_id == shelf.location_id

    @pytest.mark.anyio
    async def test_rename_leaves_similar_prefix_alone(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        lookalike = await _create(location_service, workspace_id, owner_id, "Garage 2")
        await location_service.update_location(
            workspace_id=workspace_id, location_id=garage.location_id,
            actor_id=owner_id, patch=LocationPatch(name="Warehouse"),
        )
        fetched = await location_service.get_location(
            workspace_id=workspace_id, location_id=lookalike.location_id, actor_id=owner_id,
        )
        assert fetched.path == "root.garage_2"

    @pytest.mark.anyio
    async def test_nested_rename_keeps_parent(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        garage, shelf = await _chain(
            location_service, workspace_id, owner_id, ["Garage", "Shelf A"],
        )
        renamed = await location_service.update_location(
            workspace_id=workspace_id, location_id=shelf.location_id,
            actor_id=owner_id, patch=LocationPatch(name="Top Shelf"),
        )
        assert renamed.path == "root.garage.top_shelf"
        assert renamed.parent_id == garage.location_id

    @pytest.mark.anyio
    async def test_cosmetic_rename_keeps_path(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "shelf")
        renamed = await location_service.update_location(
            workspace_id=workspace_id, location_id=shelf.location_id,
            actor_id=owner_id, patch=LocationPatch(name="SHELF"),
        )
        assert renamed.name == "SHELF"
        assert renamed.path == "root.shelf"

    @pytest.mark.anyio
    async def test_expanding_rename_fits_path_column(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        chain = await _chain(location_service, workspace_id, owner_id, ["a", "b", "c", "d", "e"])
        await location_service.update_location(
            workspace_id=workspace_id, location_id=chain[-1].location_id,
            actor_id=owner_id, patch=LocationPatch(name="æ" * 255),
        )
        await location_service.update_location(
            workspace_id=workspace_id, location_id=chain[0].location_id,
            actor_id=owner_id, patch=LocationPatch(name="þ" * 255),
        )
        deepest = await location_service.get_location(
            workspace_id=workspace_id, location_id=chain[-1].location_id, actor_id=owner_id,
        )
        top, leaf = ("th" * 128)[:255], ("ae" * 128)[:255]
        assert deepest.path == f"root.{top}.b.c.d.{leaf}"
        assert len(deepest.path) <= LocationRow.__table__.c.path.type.length

    @pytest.mark.anyio
    async def test_rename_into_sibling_conflicts(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        await _create(location_service, workspace_id, owner_id, "Shelf A")
        b = await _create(location_service, workspace_id, owner_id, "Shelf B")
        with pytest.raises(SiblingConflictError):
            await location_service.update_location(
                workspace_id=workspace_id, location_id=b.location_id,
                actor_id=owner_id, patch=LocationPatch(name="shelf a"),
            )

    @pytest.mark.anyio
    async def test_rename_to_unlabelable_name(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf")
        with pytest.raises(InvalidLocationNameError):
            await location_service.update_location(
                workspace_id=workspace_id, location_id=shelf.location_id,
                actor_id=owner_id, patch=LocationPatch(name="???"),
            )

    @pytest.mark.anyio
    async def test_description_only(self, location_service, workspace_id, owner_id) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf")
        updated = await location_service.update_location(
            workspace_id=workspace_id, location_id=shelf.location_id,
            actor_id=owner_id, patch=LocationPatch(description="Left wall"),
        )
        assert updated.description == "Left wall"
        assert updated.path == "root.shelf"

    @pytest.mark.anyio
    async def test_explicit_null_clears_description(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf",
                              description="Left wall")
        updated = await location_service.update_location(
            workspace_id=workspace_id, location_id=shelf.location_id,
            actor_id=owner_id, patch=LocationPatch(description=None),
        )
        assert updated.description is None

    @pytest.mark.anyio
    async def test_empty_patch_is_noop(self, location_service, workspace_id, owner_id) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf",
                              description="Left wall")
        same = await location_service.update_location(
            workspace_id=workspace_id, location_id=shelf.location_id,
            actor_id=owner_id, patch=LocationPatch(),
        )
        assert same.description == "Left wall"
        assert same.name == "Shelf"

    @pytest.mark.anyio
    async def test_missing_location(self, location_service, workspace_id, owner_id) -> None:
        with pytest.raises(LocationNotFoundError):
            await location_service.update_location(
                workspace_id=workspace_id, location_id=new_uuid7(),
                actor_id=owner_id, patch=LocationPatch(name="X"),
            )


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestReadLocations:
    @pytest.mark.anyio
    async def test_get_nested_has_parent(self, location_service, workspace_id, owner_id) -> None:
        garage, shelf = await _chain(location_service, workspace_id, owner_id, ["Garage", "Shelf"])
        fetched = await location_service.get_location(
            workspace_id=workspace_id, location_id=shelf.location_id, actor_id=owner_id,
        )
        assert fetched.parent_id == garage.location_id

    @pytest.mark.anyio
    async def test_get_missing(self, location_service, workspace_id, owner_id) -> None:
        with pytest.raises(LocationNotFoundError):
            await location_service.get_location(
                workspace_id=workspace_id, location_id=new_uuid7(), actor_id=owner_id,
            )

    @pytest.mark.anyio
    async def test_list_top_level(self, location_service, workspace_id, owner_id) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        await _create(location_service, workspace_id, owner_id, "Cellar")
        await _create(location_service, workspace_id, owner_id, "Shelf", garage)

        top = await location_service.list_locations(
            workspace_id=workspace_id, actor_id=owner_id,
        )
        assert [loc.path for loc in top] == ["root.cellar", "root.garage"]
        assert all(loc.parent_id is None for loc in top)

    @pytest.mark.anyio
    async def test_list_direct_children(self, location_service, workspace_id, owner_id) -> None:
        garage, shelf = await _chain(location_service, workspace_id, owner_id, ["Garage", "Shelf"])
        await _create(location_service, workspace_id, owner_id, "Box", shelf)
        await _create(location_service, workspace_id, owner_id, "Bike", garage)

        children = await location_service.list_locations(
            workspace_id=workspace_id, actor_id=owner_id, parent_id=garage.location_id,
        )
        assert [c.path for c in children] == ["root.garage.bike", "root.garage.shelf"]
        assert {c.parent_id for c in children} == {garage.location_id}

    @pytest.mark.anyio
    async def test_list_children_of_missing_parent(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        with pytest.raises(ParentNotFoundError):
            await location_service.list_locations(
                workspace_id=workspace_id, actor_id=owner_id, parent_id=new_uuid7(),
            )

    @pytest.mark.anyio
    async def test_ancestors_root_first(self, location_service, workspace_id, owner_id) -> None:
        garage, shelf, box = await _chain(
            location_service, workspace_id, owner_id, ["Garage", "Shelf", "Box"],
        )
        ancestors = await location_service.list_ancestors(
            workspace_id=workspace_id, location_id=box.location_id, actor_id=owner_id,
        )
        assert [a.location_id for a in ancestors] == [garage.location_id, shelf.location_id]
        assert ancestors[0].parent_id is None
        assert ancestors[1].parent_id == garage.location_id

    @pytest.mark.anyio
    async def test_ancestors_of_top_level(self, location_service, workspace_id, owner_id) -> None:
        garage = await _create(location_service, workspace_id, owner_id, "Garage")
        assert await location_service.list_ancestors(
            workspace_id=workspace_id, location_id=garage.location_id, actor_id=owner_id,
        ) == []

    @pytest.mark.anyio
    async def test_descendants_exclude_self_and_siblings(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        garage, shelf = await _chain(location_service, workspace_id, owner_id, ["Garage", "Shelf"])
        await _create(location_service, workspace_id, owner_id, "Cellar")
        descendants = await location_service.list_descendants(
            workspace_id=workspace_id, location_id=garage.location_id, actor_id=owner_id,
        )
        assert [d.location_id for d in descendants] == [shelf.location_id]
        assert descendants[0].parent_id == garage.location_id


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDeleteLocation:
    @pytest.mark.anyio
    async def test_soft_delete_cascades(self, location_service, workspace_id, owner_id) -> None:
        garage, shelf, box = await _chain(
            location_service, workspace_id, owner_id, ["Garage", "Shelf", "Box"],
        )
        count = await location_service.delete_location(
            workspace_id=workspace_id, location_id=garage.location_id, actor_id=owner_id,
        )
        assert count == 3
        for loc in (garage, shelf, box):
            with pytest.raises(LocationNotFoundError):
                await location_service.get_location(
                    workspace_id=workspace_id, location_id=loc.location_id, actor_id=owner_id,
                )

    @pytest.mark.anyio
    async def test_delete_twice(self, location_service, workspace_id, owner_id) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf")
        await location_service.delete_location(
            workspace_id=workspace_id, location_id=shelf.location_id, actor_id=owner_id,
        )
        with pytest.raises(LocationNotFoundError):
            await location_service.delete_location(
                workspace_id=workspace_id, location_id=shelf.location_id, actor_id=owner_id,
            )

    @pytest.mark.anyio
    async def test_recreate_after_delete(self, location_service, workspace_id, owner_id) -> None:
        old = await _create(location_service, workspace_id, owner_id, "Shelf")
        await location_service.delete_location(
            workspace_id=workspace_id, location_id=old.location_id, actor_id=owner_id,
        )
        new = await _create(location_service, workspace_id, owner_id, "Shelf")
        assert new.path == old.path
        assert new.location_id != old.location_id

    @pytest.mark.anyio
    async def test_deleted_hidden_from_listing(
        self, location_service, workspace_id, owner_id,
    ) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf")
        await location_service.delete_location(
            workspace_id=workspace_id, location_id=shelf.location_id, actor_id=owner_id,
        )
        assert await location_service.list_locations(
            workspace_id=workspace_id, actor_id=owner_id,
        ) == []


# ---------------------------------------------------------------------------
# Membership gate
# ---------------------------------------------------------------------------


class TestMembershipGate:
    @pytest.mark.anyio
    async def test_non_member_cannot_create(self, location_service, workspace_id) -> None:
        with pytest.raises(WorkspaceMembershipError):
            await _create(location_service, workspace_id, new_uuid7(), "Shelf")

    @pytest.mark.anyio
    async def test_non_member_cannot_read(self, location_service, workspace_id, owner_id) -> None:
        shelf = await _create(location_service, workspace_id, owner_id, "Shelf")
        with pytest.raises(WorkspaceMembershipError):
            await location_service.get_location(
                workspace_id=workspace_id, location_id=shelf.location_id,
                actor_id=new_uuid7(),
            )

    @pytest.mark.anyio
    async def test_unknown_workspace(self, location_service, owner_id) -> None:
        with pytest.raises(WorkspaceNotFoundError):
            await location_service.list_locations(
                workspace_id=new_uuid7(), actor_id=owner_id,
            )

    @pytest.mark.anyio
    async def test_added_member_can_create(
        self, location_service, workspace_service, workspace_id, owner_id,
    ) -> None:
        member_id = new_uuid7()
        await workspace_service.add_member(
            workspace_id=workspace_id, actor_id=owner_id,
            user_id=member_id, role=MemberRole.MEMBER,
        )
        loc = await _create(location_service, workspace_id, member_id, "Shelf")
        assert loc.path == "root.shelf"
