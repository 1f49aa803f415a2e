# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Circuit breaker state enumeration for fault tolerance monitoring."""

from enum import Enum


class EnumCircuitBreakerState(str, Enum):
    """Circuit breaker state enumeration for fault tolerance patterns.

    The numeric ``gauge_value`` is what the Prometheus exporter publishes.
    """

    CLOSED = "CLOSED"
    HALF_OPEN = "HALF_OPEN"
    OPEN = "OPEN"

    @property
    def gauge_value(self) -> int:
        """Numeric encoding (0=closed, 1=half_open, 2=open)."""
        return {
            EnumCircuitBreakerState.CLOSED: 0,
            EnumCircuitBreakerState.HALF_OPEN: 1,
            EnumCircuitBreakerState.OPEN: 2,
        }[self]


__all__ = ["EnumCircuitBreakerState"]
