"""Exceptions raised by the location hierarchy and its workspace gate.

Every error carries a stable `code`. Routers translate them to HTTP status
codes; the service never retries or swallows them.
"""


class LocatorError(Exception):
    """Base exception for hierarchy failures."""

    default_message = "Location operation failed."
    default_code = "LOCATOR_ERROR"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.code = code or self.default_code


# --- Validation ---


class InvalidLocationNameError(LocatorError):
    default_message = "Location name must contain at least one letter or digit."
    default_code = "INVALID_NAME"


# --- Not found ---


class LocationNotFoundError(LocatorError):
    default_message = "Location not found."
    default_code = "LOCATION_NOT_FOUND"


class ParentNotFoundError(LocationNotFoundError):
    default_message = "Parent location not found."
    default_code = "PARENT_NOT_FOUND"


class WorkspaceNotFoundError(LocatorError):
    default_message = "Workspace not found."
    default_code = "WORKSPACE_NOT_FOUND"


# --- Hierarchy constraints ---


class DepthExceededError(LocatorError):
    default_message = "Locations can be nested at most 5 levels deep."
    default_code = "MAX_DEPTH_EXCEEDED"


class SiblingConflictError(LocatorError):
    default_message = "A location with this name already exists at this level."
    default_code = "SIBLING_CONFLICT"


# --- Access ---


class WorkspaceMembershipError(LocatorError):
    default_message = "You are not a member of this workspace."
    default_code = "NOT_A_MEMBER"


class InsufficientPermissionsError(LocatorError):
    default_message = "Your workspace role does not allow this operation."
    default_code = "INSUFFICIENT_PERMISSIONS"


class DuplicateMemberError(LocatorError):
    default_message = "User is already a member of this workspace."
    default_code = "DUPLICATE_MEMBER"
