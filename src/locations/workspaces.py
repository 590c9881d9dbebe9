"""Workspace tenancy: creation, membership, and the membership gate.

Every location operation passes through `require_member` with an explicit
workspace id and actor id.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from src.locations.errors import (
    DuplicateMemberError,
    InsufficientPermissionsError,
    WorkspaceMembershipError,
    WorkspaceNotFoundError,
)
from src.models.common import MANAGING_ROLES, MemberRole, new_uuid7
from src.models.workspace import Workspace, WorkspaceMember
from src.repositories.workspace import WorkspaceRepository

logger = structlog.get_logger(__name__)


class WorkspaceService:
    def __init__(self, repo: WorkspaceRepository) -> None:
        self._repo = repo

    async def create_workspace(
        self, *, actor_id: UUID, name: str, description: str = "",
    ) -> Workspace:
        """Create a workspace; the creator becomes its owner."""
        row = await self._repo.create(
            workspace_id=new_uuid7(), name=name,
            description=description, created_by=actor_id,
        )
        await self._repo.add_member(
            workspace_id=row.workspace_id, user_id=actor_id,
            role=MemberRole.OWNER.value,
        )
        logger.info("workspace_created", workspace_id=str(row.workspace_id),
                    actor_id=str(actor_id))
        return Workspace.model_validate(row)

    async def get_workspace(self, *, workspace_id: UUID, actor_id: UUID) -> Workspace:
        await self.require_member(workspace_id, actor_id)
        row = await self._repo.get(workspace_id)
        return Workspace.model_validate(row)

    async def list_workspaces(self, *, actor_id: UUID) -> list[Workspace]:
        rows = await self._repo.list_for_user(actor_id)
        return [Workspace.model_validate(r) for r in rows]

    async def list_members(
        self, *, workspace_id: UUID, actor_id: UUID,
    ) -> list[WorkspaceMember]:
        await self.require_member(workspace_id, actor_id)
        rows = await self._repo.list_members(workspace_id)
        return [WorkspaceMember.model_validate(r) for r in rows]

    async def add_member(
        self,
        *,
        workspace_id: UUID,
        actor_id: UUID,
        user_id: UUID,
        role: MemberRole,
    ) -> WorkspaceMember:
        """Add a user to the workspace. Only owners and admins may do this.

        Raises:
            InsufficientPermissionsError: actor is not owner/admin, or tries
                to grant the owner role.
            DuplicateMemberError: user is already a member.
        """
        actor = await self.require_member(workspace_id, actor_id)
        if MemberRole(actor.role) not in MANAGING_ROLES:
            raise InsufficientPermissionsError
        if role == MemberRole.OWNER:
            raise InsufficientPermissionsError("A workspace has a single owner.")
        if await self._repo.get_member(workspace_id, user_id) is not None:
            raise DuplicateMemberError
        try:
            row = await self._repo.add_member(
                workspace_id=workspace_id, user_id=user_id, role=role.value,
            )
        except IntegrityError as exc:
            raise DuplicateMemberError from exc
        logger.info("workspace_member_added", workspace_id=str(workspace_id),
                    user_id=str(user_id), role=role.value, actor_id=str(actor_id))
        return WorkspaceMember.model_validate(row)

    async def require_member(self, workspace_id: UUID, actor_id: UUID) -> WorkspaceMember:
        """Return the actor's membership or raise.

        Raises:
            WorkspaceNotFoundError: workspace does not exist.
            WorkspaceMembershipError: actor is not a member.
        """
        if await self._repo.get(workspace_id) is None:
            raise WorkspaceNotFoundError
        member = await self._repo.get_member(workspace_id, actor_id)
        if member is None:
            logger.warning("workspace_access_denied", workspace_id=str(workspace_id),
                           actor_id=str(actor_id))
            raise WorkspaceMembershipError
        return WorkspaceMember.model_validate(member)
