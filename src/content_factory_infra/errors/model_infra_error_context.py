# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Context Model.

Bundles the structured fields every infrastructure error carries so that
error constructors stay short and strongly typed.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Structured context for infrastructure errors.

    Attributes:
        transport_type: Transport involved (DATABASE, HTTP, RUNTIME)
        operation: Operation being performed (execute_query, reconnect, ...)
        target_name: Target resource, e.g. ``"postgres"`` or a webhook host
        correlation_id: Request correlation ID for tracing

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.DATABASE,
        ...     operation="execute_query",
        ...     target_name="postgres",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise InfraConnectionError("Failed to connect", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport_type: Optional[EnumInfraTransportType] = Field(
        default=None,
        description="Type of infrastructure transport (DATABASE, HTTP, RUNTIME)",
    )
    operation: Optional[str] = Field(
        default=None,
        description="Operation being performed (execute_query, reconnect, etc.)",
    )
    target_name: Optional[str] = Field(
        default=None,
        description="Target resource or endpoint name",
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Request correlation ID for tracing",
    )


__all__ = ["ModelInfraErrorContext"]
