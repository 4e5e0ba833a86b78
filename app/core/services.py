"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with logging, unit-of-work and exception helpers

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, membership, not found)
    - Exceptions: Use for unexpected failures (database errors, bugs); convert
      them at the service boundary with BaseService.handle_exception()

Usage:
    from core.exceptions import NotFoundError
    from core.services import BaseService, ServiceResult

    class GroupService(BaseService):
        @classmethod
        def rename(cls, group_id: int, name: str) -> ServiceResult[Group]:
            group = Group.objects.visible().filter(pk=group_id).first()
            if group is None:
                return ServiceResult.failure(
                    "Group not found",
                    error_code="GROUP_NOT_FOUND",
                    error_class=NotFoundError,
                )
            with cls.atomic():
                group.name = name
                group.save(update_fields=["name", "updated_at"])
            return ServiceResult.success(group)

    # In view
    result = GroupService.rename(group_id, name)
    if result.success:
        return Response(GroupSerializer(result.data).data)
    return Response(result.to_response(), status=result.status_code)
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.conf import settings
from django.db import connection, transaction

from core.exceptions import (
    BaseApplicationError,
    InfrastructureError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors or offending values for validation failures
        error_class: Taxonomy class of the failure (see core.exceptions)

    Usage:
        # Success case
        return ServiceResult.success(group)

        # Failure case
        return ServiceResult.failure(
            "You are not a member of this group",
            error_code="NOT_GROUP_MEMBER",
            error_class=PermissionDeniedError,
        )

        # Check result
        result = GroupMessageService.send_group_message(group_id, user_id, body)
        if not result:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, Any] | None = field(default=None)
    error_class: type[BaseApplicationError] | None = field(default=None, repr=False)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, Any] | None = None,
        error_class: type[BaseApplicationError] = ValidationError,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            error_class: Taxonomy class deciding the HTTP status

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code or error_class.default_error_code,
            errors=errors,
            error_class=error_class,
        )

    @classmethod
    def from_exception(
        cls, exc: Exception, error_code: str | None = None
    ) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own code, details and class; anything
        else is reported as an infrastructure failure.

        Args:
            exc: The caught exception
            error_code: Optional error code override

        Returns:
            ServiceResult with error details from exception
        """
        if isinstance(exc, BaseApplicationError):
            return cls(
                success=False,
                error=exc.message,
                error_code=error_code or exc.error_code,
                errors=exc.details or None,
                error_class=type(exc),
            )
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or InfrastructureError.default_error_code,
            error_class=InfrastructureError,
        )

    @property
    def status_code(self) -> int:
        """HTTP status for this result (200 for successes)."""
        if self.success:
            return 200
        return (self.error_class or ValidationError).status_code

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Field-level errors are merged into the top level so clients read
        ``invalid_ids`` directly from the body.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response.update(self.errors)
        return response

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management with a statement timeout
    - Conversion of unexpected exceptions into logged failures

    Design Notes:
        - Use @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Let database errors escape atomic() so the transaction rolls back,
          then convert them with handle_exception()
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls, timeout_ms: int | None = None) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are wrapped in
        one transaction; any exception rolls every change back.

        On PostgreSQL a ``SET LOCAL statement_timeout`` bounds each statement
        in the transaction. An expired timeout raises a database error, which
        aborts the block exactly like any other failure.

        Args:
            timeout_ms: Statement timeout in milliseconds. Defaults to
                settings.MESSAGING_STATEMENT_TIMEOUT_MS; 0 disables it.

        Example:
            with cls.atomic():
                group = Group.objects.create(name=name, created_by_id=user_id)
                Membership.objects.bulk_create(rows)
                # If bulk_create fails, the group insert is rolled back too
        """
        if timeout_ms is None:
            timeout_ms = getattr(settings, "MESSAGING_STATEMENT_TIMEOUT_MS", 0)

        with transaction.atomic():
            if timeout_ms and connection.vendor == "postgresql":
                with connection.cursor() as cursor:
                    cursor.execute(
                        "SET LOCAL statement_timeout = %s", [int(timeout_ms)]
                    )
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert an unexpected exception to a logged ServiceResult failure.

        A correlation id is generated, written to the log line with the full
        traceback and returned to the caller in the error details, so a
        client report can be matched to the server log.

        Args:
            exc: The caught exception
            context: Operation name for logging
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult failure classed as InfrastructureError

        Example:
            try:
                with cls.atomic():
                    ...
            except DatabaseError as e:
                return cls.handle_exception(e, "create_group")
        """
        correlation_id = uuid.uuid4().hex
        cls.get_logger().log(
            log_level,
            f"{context or 'operation'} failed [correlation_id={correlation_id}]: {exc}",
            exc_info=True,
        )
        return ServiceResult.failure(
            "The operation could not be completed. Please retry.",
            error_code=InfrastructureError.default_error_code,
            errors={"correlation_id": correlation_id},
            error_class=InfrastructureError,
        )
