"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (HTTP 400)
    ├── PermissionDeniedError - Authorization failures (HTTP 403)
    ├── NotFoundError - Resource missing or hidden (HTTP 404)
    ├── ConflictError - State conflicts such as duplicate rows (HTTP 409)
    └── InfrastructureError - Store / transaction failures (HTTP 503)

Each class carries the HTTP status its failures map to, so views can turn
either an exception or a ServiceResult error code into a response without
their own lookup tables.

Usage:
    from core.exceptions import InfrastructureError, ValidationError

    raise ValidationError(
        "Some member ids are invalid or inactive",
        error_code="INVALID_MEMBER_IDS",
        details={"invalid_ids": [7, 9]},
    )

    try:
        ...
    except BaseApplicationError as e:
        return ServiceResult.from_exception(e)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, offending ids, etc.)
        status_code: HTTP status used when the error reaches a view
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for empty or oversized bodies and names, malformed member-id lists
    and member ids that do not resolve to active users. Always raised before
    any store mutation.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the actor may not read or write a resource.

    Kept distinct from NotFoundError so "empty because unauthorized" is never
    confused with "empty because missing".
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class NotFoundError(BaseApplicationError):
    """
    Raised when a resource is missing or hidden.

    Deactivated groups are reported through this class rather than
    PermissionDeniedError so their prior existence is not revealed.
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current state.

    Use for unique constraint violations such as a second active membership
    row for the same (user, group) pair.
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class InfrastructureError(BaseApplicationError):
    """
    Raised when the store or a transaction fails.

    The message returned to clients is opaque; the underlying database error
    is logged together with the correlation id carried in details.
    """

    default_error_code: str = "INFRASTRUCTURE_ERROR"
    status_code: int = 503

