# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Errors Module.

Exports:
    ModelInfraErrorContext: Configuration model for bundled error context
    RuntimeHostError: Base infrastructure error class
    ProtocolConfigurationError: Configuration validation errors
    InfraConnectionError: Pool creation and connectivity errors
    InfraUnavailableError: Resource unavailable errors
    CircuitOpenError: Circuit breaker rejections
    DatabaseOperationError: Final classified failure of a database operation

Correlation ID Assignment:
    - Propagate correlation_id from the caller's context when one exists
    - Otherwise generate one with uuid4()
    - Keep correlation IDs as UUID objects; convert to str only in log extras

Error Sanitization Guidelines:
    NEVER include passwords, DSNs with credentials, API keys or tokens in
    error messages or context. Driver messages are passed through
    ``content_factory_infra.utils.sanitize_error_message`` before they are
    embedded in an infrastructure error.

    Example - GOOD::

        raise InfraConnectionError(
            "Failed to create connection pool",
            context=context,
            host="db.example.com",
            retry_count=3,
        ) from e
"""

from content_factory_infra.errors.infra_errors import (
    CircuitOpenError,
    DatabaseOperationError,
    InfraConnectionError,
    InfraUnavailableError,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from content_factory_infra.errors.model_infra_error_context import (
    ModelInfraErrorContext,
)

__all__: list[str] = [
    "CircuitOpenError",
    "DatabaseOperationError",
    "InfraConnectionError",
    "InfraUnavailableError",
    "ModelInfraErrorContext",
    "ProtocolConfigurationError",
    "RuntimeHostError",
]
