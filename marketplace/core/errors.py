# marketplace/core/errors.py
"""
Typed application errors.

Services raise these instead of bare HTTPException so callers can tell
"not found", "unauthorized" and "infrastructure" failures apart (retry vs.
surface to user vs. alert operator). They still subclass HTTPException, so
FastAPI renders them as `{"detail": ...}` with the right status code and
routers need no extra handling.
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for all typed application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: Any = None, status_code: int | None = None):
        super().__init__(
            status_code=status_code or self.status_code,
            detail=detail,
        )


class InvalidRequestError(AppError):
    """Bad or missing fields, business-rule violations. No mutation occurred."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(InvalidRequestError):
    """Order status change that the lifecycle does not allow."""


class WebhookVerificationError(InvalidRequestError):
    """Identity webhook with missing or unverifiable signature."""


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    """Caller is known but lacks the capability for this operation."""

    status_code = status.HTTP_403_FORBIDDEN


class RoleLockedError(AuthorizationError):
    """ADMIN is a one-way state; role self-selection is refused."""


class NotFoundError(AppError):
    """Resource does not exist or is not visible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND


class InfrastructureError(AppError):
    """Document store unreachable, or a multi-step write stopped half way."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class RepairError(InfrastructureError):
    """
    A repair phase failed.

    Carries the phase that failed and the actions already applied, since
    deletions done before the failure are not rolled back.
    """

    def __init__(self, phase: str, actions: list, cause: Exception):
        self.phase = phase
        self.actions = actions
        self.cause = cause
        super().__init__(detail=f"Repair failed during '{phase}': {cause}")
