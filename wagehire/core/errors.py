"""
Error taxonomy for the Wagehire API.

Every failure surfaced to a caller is one of these kinds. Each carries a
stable machine-readable ``code`` next to the human-readable ``detail`` so
clients never have to parse messages.
"""
from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for caller-visible failures."""

    code = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, **extra: Any):
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"detail": self.detail, "code": self.code}
        payload.update(self.extra)
        return payload


class Unauthenticated(AppError):
    """Missing, invalid or expired credential."""
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class Forbidden(AppError):
    """Authenticated, but the policy denies the action."""
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(AppError):
    """Resource absent or outside the caller's scope."""
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationFailed(AppError):
    code = "validation_failed"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"


class Conflict(AppError):
    """Uniqueness violation, referential guard or duplicate submission."""
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class Internal(AppError):
    pass
