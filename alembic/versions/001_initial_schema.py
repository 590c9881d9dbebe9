"""Initial schema — workspaces, workspace members, locations.

Locations carry a materialized path. Uniqueness of (workspace_id, path) is
enforced by a partial index over active rows only; depth is capped at the
anchor plus 5 levels by a CHECK on the number of separators.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "workspaces",
        sa.Column("workspace_id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("created_by", sa.Uuid, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "workspace_members",
        sa.Column("member_id", sa.Uuid, primary_key=True),
        sa.Column(
            "workspace_id", sa.Uuid,
            sa.ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid, nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),
    )
    op.create_index("ix_workspace_members_workspace_id", "workspace_members", ["workspace_id"])
    op.create_index("ix_workspace_members_user_id", "workspace_members", ["user_id"])

    op.create_table(
        "locations",
        sa.Column("location_id", sa.Uuid, primary_key=True),
        sa.Column(
            "workspace_id", sa.Uuid,
            sa.ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("path", sa.String(2000), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "length(path) - length(replace(path, '.', '')) <= 5",
            name="ck_locations_path_depth",
        ),
    )
    op.create_index("ix_locations_workspace_id", "locations", ["workspace_id"])
    op.create_index(
        "uq_locations_workspace_path_active",
        "locations",
        ["workspace_id", "path"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
        sqlite_where=sa.text("is_deleted = 0"),
    )
    # Prefix scans for descendant queries.
    op.create_index(
        "ix_locations_path_prefix",
        "locations",
        ["workspace_id", "path"],
        postgresql_ops={"path": "text_pattern_ops"},
    )


def downgrade() -> None:
    op.drop_index("ix_locations_path_prefix", table_name="locations")
    op.drop_index("uq_locations_workspace_path_active", table_name="locations")
    op.drop_index("ix_locations_workspace_id", table_name="locations")
    op.drop_table("locations")
    op.drop_index("ix_workspace_members_user_id", table_name="workspace_members")
    op.drop_index("ix_workspace_members_workspace_id", table_name="workspace_members")
    op.drop_table("workspace_members")
    op.drop_table("workspaces")
