# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enumerations for content_factory_infra.

Exports:
    EnumAlertComparison: Comparison operators for custom alert rules
    EnumAlertType: Alert severity (info, warning, error, critical)
    EnumCircuitBreakerState: Circuit breaker state (CLOSED, HALF_OPEN, OPEN)
    EnumDbErrorKind: Classified cause of a database failure
    EnumHealthStatus: Health status (healthy, degraded, unhealthy)
    EnumInfraErrorCode: Machine readable infrastructure error codes
    EnumInfraTransportType: Transport type for error context
    EnumSystemErrorType: Subsystem attribution for recorded errors
"""

from content_factory_infra.enums.enum_alert_comparison import EnumAlertComparison
from content_factory_infra.enums.enum_alert_type import EnumAlertType
from content_factory_infra.enums.enum_circuit_breaker_state import (
    EnumCircuitBreakerState,
)
from content_factory_infra.enums.enum_db_error_kind import EnumDbErrorKind
from content_factory_infra.enums.enum_health_status import EnumHealthStatus
from content_factory_infra.enums.enum_infra_error_code import EnumInfraErrorCode
from content_factory_infra.enums.enum_infra_transport_type import (
    EnumInfraTransportType,
)
from content_factory_infra.enums.enum_system_error_type import EnumSystemErrorType

__all__: list[str] = [
    "EnumAlertComparison",
    "EnumAlertType",
    "EnumCircuitBreakerState",
    "EnumDbErrorKind",
    "EnumHealthStatus",
    "EnumInfraErrorCode",
    "EnumInfraTransportType",
    "EnumSystemErrorType",
]
