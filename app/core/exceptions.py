"""
Domain Errors
Raised by services and dependencies, rendered as {ok: false, message} by main.py
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors with a client-facing message and HTTP status"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"ok": False, "message": self.message, **self.extra}


class ValidationError(AppError):
    """Malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


class BadRequest(AppError):
    """Valid input, but the entity is in the wrong state for the transition"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"
