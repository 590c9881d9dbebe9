"""SQLAlchemy ORM table models for the storage locator.

Categories:
- TENANCY: WorkspaceRow, WorkspaceMemberRow
- HIERARCHY: LocationRow (materialized path, soft-deleted, never hard-deleted)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    false,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.db.session import Base

# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------


class WorkspaceRow(Base):
    __tablename__ = "workspaces"

    workspace_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    created_by: Mapped[UUID] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class WorkspaceMemberRow(Base):
    """User membership in a workspace. One row per (workspace, user)."""

    __tablename__ = "workspace_members"
    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),
    )

    member_id: Mapped[UUID] = mapped_column(primary_key=True)
    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class LocationRow(Base):
    """Location node. `path` is the dot-joined label sequence from `root`.

    Uniqueness of `path` only holds among active rows, so a soft-deleted
    location never blocks re-creating the same name. The depth check counts
    separators: at most 5 dots, i.e. the anchor plus 5 levels.
    """

    __tablename__ = "locations"
    __table_args__ = (
        Index(
            "uq_locations_workspace_path_active",
            "workspace_id",
            "path",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index(
            "ix_locations_path_prefix",
            "workspace_id",
            "path",
            postgresql_ops={"path": "text_pattern_ops"},
        ),
        CheckConstraint(
            "length(path) - length(replace(path, '.', '')) <= 5",
            name="ck_locations_path_depth",
        ),
    )

    location_id: Mapped[UUID] = mapped_column(primary_key=True)
    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    path: Mapped[str] = mapped_column(String(2000), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
