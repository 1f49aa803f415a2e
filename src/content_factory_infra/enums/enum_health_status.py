# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Health status enumeration for service health monitoring."""

from enum import Enum


class EnumHealthStatus(str, Enum):
    """Overall health of the monitored system or of a single check."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def http_status(self) -> int:
        """HTTP status code returned by the health endpoint for this status."""
        return 503 if self is EnumHealthStatus.UNHEALTHY else 200

    @property
    def gauge_value(self) -> float:
        """Numeric encoding (1=healthy, 0.5=degraded, 0=unhealthy)."""
        if self is EnumHealthStatus.HEALTHY:
            return 1.0
        if self is EnumHealthStatus.DEGRADED:
            return 0.5
        return 0.0


__all__ = ["EnumHealthStatus"]
