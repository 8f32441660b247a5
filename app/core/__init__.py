"""
Core Application - Infrastructure & Base Classes

Shared plumbing for the marketplace apps. Nothing here knows about items,
conversations or messages.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Managers (import from core.managers):
    - BaseQuerySet: Time-ordered queryset helpers (newest, updated_since, ...)
    - BaseManager: Manager using BaseQuerySet

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - UnauthorizedError, NotFoundError, InvalidOperationError,
      ValidationError, PermissionDeniedError, ConflictError,
      TransientStoreError
    - status_for_error_code: HTTP status for an error code

Views (import from core.views):
    - health_check: Liveness/readiness endpoint
    - service_error_response / validation_error_response: Error bodies

Note:
    Models and managers are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
    TransientStoreError,
    UnauthorizedError,
    ValidationError,
    status_for_error_code,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "UnauthorizedError",
    "NotFoundError",
    "InvalidOperationError",
    "ValidationError",
    "PermissionDeniedError",
    "ConflictError",
    "TransientStoreError",
    "status_for_error_code",
]
