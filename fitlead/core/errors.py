"""Error kinds raised by services and translated to JSON responses.

Every kind carries its HTTP status so routers and services can raise it
directly, the same way they would raise ``HTTPException``.
"""

from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(status_code=self.status_code, detail=message or self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class StorageError(AppError):
    """Any failure of the underlying store.

    The original exception is kept as ``__cause__`` for logging; the client
    only ever sees the generic message.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"

    def __init__(self, message: Optional[str] = None, is_integrity: bool = False) -> None:
        super().__init__(message)
        self.is_integrity = is_integrity
