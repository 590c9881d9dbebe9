"""Translate hierarchy errors into HTTP responses.

Response body: {"detail": {"code": "<ERROR_CODE>", "message": "<text>"}}.
"""

from fastapi import HTTPException

from src.locations.errors import (
    DepthExceededError,
    DuplicateMemberError,
    InsufficientPermissionsError,
    InvalidLocationNameError,
    LocationNotFoundError,
    LocatorError,
    SiblingConflictError,
    WorkspaceMembershipError,
    WorkspaceNotFoundError,
)

_STATUS_BY_ERROR: dict[type[LocatorError], int] = {
    InvalidLocationNameError: 422,
    LocationNotFoundError: 404,
    WorkspaceNotFoundError: 404,
    DepthExceededError: 400,
    SiblingConflictError: 409,
    DuplicateMemberError: 409,
    WorkspaceMembershipError: 403,
    InsufficientPermissionsError: 403,
}


def http_error(exc: LocatorError) -> HTTPException:
    """Map a LocatorError (or subclass) to an HTTPException. Unknown kinds → 500."""
    status_code = 500
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            status_code = _STATUS_BY_ERROR[cls]
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": str(exc)},
    )
