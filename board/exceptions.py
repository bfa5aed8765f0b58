"""
Domain exception hierarchy.

Services raise these instead of returning ``None`` sentinels; the
handlers registered in ``board.main`` translate each type into a status
code and the shared error payload::

    BoardError (base)            -> 500
    ├── InvalidArgumentError     -> 400
    ├── AuthenticationError      -> 401
    ├── PermissionDeniedError    -> 403
    ├── NotFoundError            -> 404
    └── ConflictError            -> 409

None of these are retried: each is the terminal outcome of one request.
"""
from typing import Any, Dict, Optional


class BoardError(Exception):
    """
    Base class for all application errors.

    ``message`` is safe to return to the client; ``context`` is logged
    server-side only.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidArgumentError(BoardError):
    status_code = 400

    def __init__(self, message: str = "Invalid argument", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class AuthenticationError(BoardError):
    """Missing, malformed or expired credentials."""

    status_code = 401

    def __init__(self, message: str = "Authentication required", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class PermissionDeniedError(BoardError):
    """The caller is authenticated but has no rights over the target."""

    status_code = 403

    def __init__(self, message: str = "Permission denied", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class NotFoundError(BoardError):
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(BoardError):
    """The request would create duplicate state (double like, taken email)."""

    status_code = 409

    def __init__(self, message: str = "Resource already exists", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)
