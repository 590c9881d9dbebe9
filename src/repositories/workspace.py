"""Workspace and membership repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import WorkspaceMemberRow, WorkspaceRow
from src.models.common import new_uuid7, utc_now


class WorkspaceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, workspace_id: UUID, name: str,
                     description: str, created_by: UUID) -> WorkspaceRow:
        now = utc_now()
        row = WorkspaceRow(
            workspace_id=workspace_id, name=name,
            description=description, created_by=created_by,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, workspace_id: UUID) -> WorkspaceRow | None:
        return await self._session.get(WorkspaceRow, workspace_id)

    async def list_for_user(self, user_id: UUID) -> list[WorkspaceRow]:
        result = await self._session.execute(
            select(WorkspaceRow)
            .join(
                WorkspaceMemberRow,
                WorkspaceMemberRow.workspace_id == WorkspaceRow.workspace_id,
            )
            .where(WorkspaceMemberRow.user_id == user_id)
            .order_by(WorkspaceRow.created_at),
        )
        return list(result.scalars().all())

    # --- Members ---

    async def add_member(self, *, workspace_id: UUID, user_id: UUID,
                         role: str) -> WorkspaceMemberRow:
        row = WorkspaceMemberRow(
            member_id=new_uuid7(), workspace_id=workspace_id,
            user_id=user_id, role=role, created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get_member(self, workspace_id: UUID,
                         user_id: UUID) -> WorkspaceMemberRow | None:
        result = await self._session.execute(
            select(WorkspaceMemberRow).where(
                WorkspaceMemberRow.workspace_id == workspace_id,
                WorkspaceMemberRow.user_id == user_id,
            ),
        )
        return result.scalar_one_or_none()

    async def list_members(self, workspace_id: UUID) -> list[WorkspaceMemberRow]:
        result = await self._session.execute(
            select(WorkspaceMemberRow)
            .where(WorkspaceMemberRow.workspace_id == workspace_id)
            .order_by(WorkspaceMemberRow.created_at),
        )
        return list(result.scalars().all())
