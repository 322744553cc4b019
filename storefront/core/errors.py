# storefront/core/errors.py
"""
API error taxonomy.

Every error is an HTTPException so FastAPI handles it at the route boundary.
The optional `field` names the request field that caused the failure and is
rendered next to the message by the handlers in `storefront.main`.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, field: str | None = None):
        super().__init__(status_code=self.status_code, detail=message)
        self.field = field

    @property
    def message(self) -> str:
        return self.detail


class ValidationFailed(AppError):
    """Missing or malformed input, or a field-level constraint violation."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(AppError):
    """Missing, invalid or expired credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(AppError):
    """Valid identity without the required role or account state."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    """Uniqueness violation (duplicate email, SKU, racing cart creation)."""

    status_code = status.HTTP_409_CONFLICT
