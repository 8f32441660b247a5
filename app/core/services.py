"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (not found, invalid operation)
    - Exceptions: Use for unexpected failures (bugs); store outages are
      converted to STORE_UNAVAILABLE by BaseService.handle_exception

Usage:
    from core.services import BaseService, ServiceResult

    class ConversationService(BaseService):
        @classmethod
        def find_or_create(cls, item, buyer, seller) -> ServiceResult[Conversation]:
            if buyer.pk == seller.pk:
                return ServiceResult.failure(
                    "Sellers cannot open a conversation on their own item",
                    error_code="INVALID_OPERATION",
                )

            with cls.atomic():
                conversation = Conversation.objects.create(...)

            cls.get_logger().info(f"Created conversation {conversation.id}")
            return ServiceResult.success(conversation)

    # In view
    result = ConversationService.find_or_create(item, buyer, seller)
    if result.success:
        return Response(ConversationSerializer(result.data).data, status=201)
    return service_error_response(result)

Related:
    - core.exceptions: Error taxonomy and HTTP status mapping
    - core.views.service_error_response: Failure -> DRF Response
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import DatabaseError, transaction

from core.exceptions import BaseApplicationError, TransientStoreError

if TYPE_CHECKING:
    from collections.abc import Generator

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        result = MessageService.send(sender, item_id, receiver_id, content)
        if result.success:
            message = result.data.message
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Example:
            return ServiceResult.failure("Item not found", "NOT_FOUND")
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error code and details; any other
        exception falls back to its class name.
        """
        if isinstance(exc, BaseApplicationError):
            return cls(
                success=False,
                error=exc.message,
                error_code=error_code or exc.error_code,
                errors=exc.details or None,
            )
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def __bool__(self) -> bool:
        """Allow ``if result:`` as shorthand for ``if result.success:``."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class, e.g.
        ``chat.services.MessageService``.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        If any operation inside the block fails, every change made in the
        block is rolled back.

        Example:
            with cls.atomic():
                message = Message.objects.create(...)
                conversation.record_activity(message.content, message.created_at)
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Database errors are reported as a transient store failure so callers
        can retry; application errors keep their own codes.

        Args:
            exc: The caught exception
            context: Additional context for logging
            log_level: Logging level (default ERROR)

        Example:
            try:
                with cls.atomic():
                    ...
            except DatabaseError as e:
                return cls.handle_exception(e, "sending message")
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(log_level, message, exc_info=True)

        if isinstance(exc, DatabaseError):
            exc = TransientStoreError("The message store is temporarily unavailable")
        return ServiceResult.from_exception(exc)

    @classmethod
    def validate_required(cls, **kwargs) -> ServiceResult | None:
        """
        Validate that required fields are provided.

        Returns a failure result if any field is None or blank, None otherwise.

        Example:
            validation = cls.validate_required(item_id=item_id, content=content)
            if validation is not None:
                return validation
        """
        errors: dict[str, list[str]] = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.failure(
                f"Missing required fields: {', '.join(errors)}",
                error_code="INVALID_ARGUMENT",
                errors=errors,
            )
        return None
