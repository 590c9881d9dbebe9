"""Location model — one node of a workspace's storage hierarchy."""

from uuid import UUID

from pydantic import Field, field_validator

from src.models.common import LocatorBase, UTCTimestamp, UUIDv7

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


class Location(LocatorBase):
    """A location as returned to callers.

    `parent_id` is not stored; it is resolved from the parent path at read time
    and is None for top-level locations.
    """

    location_id: UUIDv7
    workspace_id: UUID
    name: str
    description: str | None = None
    path: str
    parent_id: UUID | None = None
    is_deleted: bool = False
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class LocationPatch(LocatorBase):
    """Partial update. Only fields explicitly set are applied.

    `description=None` clears the description; omitting it leaves it as is.
    """

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            msg = "name must not be blank"
            raise ValueError(msg)
        return v
