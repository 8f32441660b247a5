"""
Application error taxonomy.

Every failure the marketplace reports to a client falls into one of a small
set of kinds. Each kind has a machine-readable error code and an HTTP status,
so services, views and the live channel agree on how a failure is reported.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── UnauthorizedError - Missing or invalid credentials
    ├── NotFoundError - Referenced entity does not exist
    ├── InvalidOperationError - Operation not allowed in the current state
    ├── ValidationError - Malformed or missing input
    ├── PermissionDeniedError - Authenticated but not allowed
    │   └── AccountNotApprovedError - Account still pending or rejected
    ├── ConflictError - Duplicate or conflicting state
    └── TransientStoreError - Persistence temporarily unavailable (retryable)

Usage:
    from core.exceptions import NotFoundError, status_for_error_code

    raise NotFoundError("Item not found", details={"item_id": item_id})

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=status_for_error_code(e.error_code))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import status

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, identifiers)
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = status.HTTP_400_BAD_REQUEST

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

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Item not found",
                "error_code": "NOT_FOUND",
                "details": {"item_id": 123}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class UnauthorizedError(BaseApplicationError):
    """
    Raised when credentials are missing, malformed, expired or unknown.

    On the live channel this maps to close code 4001 instead of an HTTP
    status.
    """

    default_error_code: str = "UNAUTHORIZED"
    http_status: int = status.HTTP_401_UNAUTHORIZED


class NotFoundError(BaseApplicationError):
    """
    Raised when a referenced item, conversation or user does not exist.

    Also used when a conversation exists but the caller is not one of its
    participants, so its existence is not revealed.
    """

    default_error_code: str = "NOT_FOUND"
    http_status: int = status.HTTP_404_NOT_FOUND


class InvalidOperationError(BaseApplicationError):
    """
    Raised when the operation is not allowed for this caller or state.

    Example:
        if item.seller_id == buyer.id:
            raise InvalidOperationError("You cannot express interest in your own item")
    """

    default_error_code: str = "INVALID_OPERATION"


class ValidationError(BaseApplicationError):
    """
    Raised when input is malformed or a required field is missing.

    Example:
        raise ValidationError(
            "Validation failed",
            details={"content": ["This field is required."]},
        )
    """

    default_error_code: str = "INVALID_ARGUMENT"


class PermissionDeniedError(BaseApplicationError):
    """Raised when an authenticated user may not act on a resource."""

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = status.HTTP_403_FORBIDDEN


class AccountNotApprovedError(PermissionDeniedError):
    """Raised when a pending or rejected account asks for tokens."""

    default_error_code: str = "ACCOUNT_NOT_APPROVED"


class ConflictError(BaseApplicationError):
    """Raised for duplicates, e.g. following someone you already follow."""

    default_error_code: str = "CONFLICT"
    http_status: int = status.HTTP_409_CONFLICT


class TransientStoreError(BaseApplicationError):
    """
    Raised when the backing store cannot be reached or a write fails.

    The operation had no partial effect and may be retried.
    """

    default_error_code: str = "STORE_UNAVAILABLE"
    http_status: int = status.HTTP_503_SERVICE_UNAVAILABLE


ERROR_CLASSES: tuple[type[BaseApplicationError], ...] = (
    UnauthorizedError,
    NotFoundError,
    InvalidOperationError,
    ValidationError,
    PermissionDeniedError,
    AccountNotApprovedError,
    ConflictError,
    TransientStoreError,
)

ERROR_STATUS_CODES: dict[str, int] = {
    error_class.default_error_code: error_class.http_status
    for error_class in ERROR_CLASSES
}


def status_for_error_code(error_code: str | None) -> int:
    """Return the HTTP status for an error code, 400 when unknown."""
    return ERROR_STATUS_CODES.get(error_code or "", status.HTTP_400_BAD_REQUEST)
