"""
Failure kinds raised by the blog core.

Each kind carries the HTTP status and error code the transport layer renders,
so routes never have to translate them one by one.
"""
from typing import Any, Dict, Optional


class BlogError(Exception):
    """Base class for every failure the core raises on purpose."""

    status_code = 400
    error_code = "BAD_REQUEST"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(BlogError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", id: Any = None):
        message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
        super().__init__(message, {"resource": resource, "id": id})


class PermissionDenied(BlogError):
    status_code = 403
    error_code = "FORBIDDEN"


class InvalidTransition(BlogError):
    """Status target not reachable from the current status for this actor."""

    status_code = 400
    error_code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str, allowed=()):
        allowed = sorted(allowed)
        message = f"Cannot move blog from '{current}' to '{target}'"
        if allowed:
            message += f" (allowed: {', '.join(allowed)})"
        super().__init__(message, {"from": current, "to": target, "allowed": allowed})


class ValidationError(BlogError):
    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)


class StorageError(BlogError):
    """Opaque failure from the persistence collaborator."""

    status_code = 500
    error_code = "STORAGE_ERROR"
