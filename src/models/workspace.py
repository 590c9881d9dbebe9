"""Workspace model — tenant boundary for locations and membership."""

from uuid import UUID

from pydantic import Field

from src.models.common import (
    LocatorBase,
    MemberRole,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)


class Workspace(LocatorBase):
    """Top-level isolation boundary. Every location belongs to exactly one."""

    workspace_id: UUIDv7 = Field(default_factory=new_uuid7)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    created_by: UUID
    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)


class WorkspaceMember(LocatorBase):
    member_id: UUIDv7 = Field(default_factory=new_uuid7)
    workspace_id: UUID
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER
    created_at: UTCTimestamp = Field(default_factory=utc_now)
