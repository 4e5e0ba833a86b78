"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps. No messaging logic
lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - Visibility: ACTIVE / HIDDEN choices
    - VisibilityMixin: Unified visibility state with hide()

Managers (import from core.managers):
    - VisibilityQuerySet: visible() / hidden() filters and bulk hide()

Services (import from core.services):
    - BaseService: Logging, unit-of-work (atomic) and exception conversion
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError, PermissionDeniedError, NotFoundError,
      ConflictError, InfrastructureError

Note:
    Models, model mixins and managers are NOT imported here because they
    depend on Django's app registry being ready. Import them directly from
    their modules.
"""

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "InfrastructureError",
]
