# File: app/core/errors.py

"""
Application error types.

Services raise these instead of HTTPException so they stay usable outside a
request. The handlers in app.main render each one as the standard
``{"success": false, "message": ...}`` envelope with the matching status.
"""

from typing import Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, *, error: Optional[str] = None):
        self.message = message or self.message
        self.error = error
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload = {"success": False, "message": self.message}
        if self.error:
            payload["error"] = self.error
        return payload


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied. Admins only."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Already exists"


class TooManyAttemptsError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many attempts"


class DependencyError(AppError):
    """An outside collaborator (mail server, image host, database) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong"
