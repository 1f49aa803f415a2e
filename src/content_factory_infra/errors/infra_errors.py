# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure-Specific Error Classes.

Error Hierarchy:
    RuntimeHostError (base infrastructure error)
    ├── ProtocolConfigurationError
    ├── InfraConnectionError
    ├── InfraUnavailableError
    │   └── CircuitOpenError
    └── DatabaseOperationError

All errors:
    - Carry an ``EnumInfraErrorCode`` for programmatic handling
    - Support proper error chaining with ``raise ... from e``
    - Accept ``ModelInfraErrorContext`` for bundled context parameters
    - Accept arbitrary keyword context (``retry_after_seconds=...``) that is
      exposed through ``error.context``
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from content_factory_infra.enums import EnumDbErrorKind, EnumInfraErrorCode
from content_factory_infra.errors.model_infra_error_context import (
    ModelInfraErrorContext,
)


class RuntimeHostError(Exception):
    """Base error class for infrastructure errors.

    Structured Fields (via ModelInfraErrorContext):
        transport_type: Type of transport (db, http, runtime)
        operation: Operation being performed
        correlation_id: Request correlation ID for tracking
        target_name: Target resource/endpoint name

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.DATABASE,
        ...     operation="execute_query",
        ...     target_name="postgres",
        ... )
        >>> raise RuntimeHostError("Operation failed", context=context, retry_count=3)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumInfraErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        """Initialize RuntimeHostError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to OPERATION_FAILED)
            context: Bundled infrastructure context (transport_type, operation, etc.)
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or EnumInfraErrorCode.OPERATION_FAILED

        structured_context: dict[str, object] = dict(extra_context)
        self.correlation_id: Optional[UUID] = None
        if context is not None:
            if context.transport_type is not None:
                structured_context["transport_type"] = context.transport_type.value
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            self.correlation_id = context.correlation_id
        self.context = structured_context

    def __str__(self) -> str:
        if self.correlation_id is not None:
            return f"{self.message} (correlation_id: {self.correlation_id})"
        return self.message

    def to_dict(self) -> dict[str, object]:
        """Serialise the error for logs and JSON responses."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "context": {key: value for key, value in self.context.items()},
        }


class ProtocolConfigurationError(RuntimeHostError):
    """Raised when configuration parsing or validation fails.

    Example:
        >>> raise ProtocolConfigurationError(
        ...     "DB_MAX_CONNECTIONS must be an integer",
        ...     variable="DB_MAX_CONNECTIONS",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumInfraErrorCode.INVALID_CONFIGURATION,
            context=context,
            **extra_context,
        )


class InfraConnectionError(RuntimeHostError):
    """Raised when the connection pool cannot be created or reached."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumInfraErrorCode.DATABASE_CONNECTION_ERROR,
            context=context,
            **extra_context,
        )


class InfraUnavailableError(RuntimeHostError):
    """Raised when an infrastructure resource is unavailable.

    Used when reconnect attempts are exhausted and no pool exists.

    Example:
        >>> raise InfraUnavailableError(
        ...     "Database unavailable after 5 reconnect attempts",
        ...     context=context,
        ...     reconnect_attempts=5,
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        error_code: Optional[EnumInfraErrorCode] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or EnumInfraErrorCode.SERVICE_UNAVAILABLE,
            context=context,
            **extra_context,
        )


class CircuitOpenError(InfraUnavailableError):
    """Raised by the circuit breaker when it rejects a call.

    Synthesized by the breaker itself, never by the store, so callers can
    tell "service protecting itself" apart from "store returned an error".

    Attributes:
        circuit_state: ``"open"`` or ``"half_open"`` (probe already in flight)
        retry_after_seconds: Seconds until the breaker admits a probe
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        circuit_state: str = "open",
        retry_after_seconds: float = 0.0,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            error_code=EnumInfraErrorCode.CIRCUIT_OPEN,
            circuit_state=circuit_state,
            retry_after_seconds=retry_after_seconds,
            **extra_context,
        )
        self.circuit_state = circuit_state
        self.retry_after_seconds = retry_after_seconds


class DatabaseOperationError(RuntimeHostError):
    """Final, classified failure of a database operation.

    Raised after the retry budget is spent (or immediately for
    non-retryable kinds) and always chained from the driver exception, so
    ``error.__cause__`` is the original failure.

    Attributes:
        kind: Classified cause
        is_retryable: Whether a later retry may succeed
        suggested_action: Operator-facing remediation hint
        attempts: Number of attempts made before giving up
    """

    def __init__(
        self,
        message: str,
        kind: EnumDbErrorKind,
        context: Optional[ModelInfraErrorContext] = None,
        attempts: int = 1,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumInfraErrorCode.DATABASE_OPERATION_ERROR,
            context=context,
            kind=kind.value,
            is_retryable=kind.is_retryable,
            suggested_action=kind.suggested_action,
            attempts=attempts,
            **extra_context,
        )
        self.kind = kind
        self.is_retryable = kind.is_retryable
        self.suggested_action = kind.suggested_action
        self.attempts = attempts


__all__ = [
    "RuntimeHostError",
    "ProtocolConfigurationError",
    "InfraConnectionError",
    "InfraUnavailableError",
    "CircuitOpenError",
    "DatabaseOperationError",
]
