# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Mutable connection health state owned by the database connection manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

__all__: list[str] = ["ModelConnectionHealth"]


@dataclass
class ModelConnectionHealth:
    """Current health of the pooled store connection.

    Single owner: only ``DatabaseConnectionManager`` mutates instances.

    Attributes:
        is_healthy: Result of the most recent probe or operation.
        last_check: When the state was last updated.
        response_time_ms: Latency of the most recent probe or operation.
        error_count: Total failures observed (monotonic).
        consecutive_failures: Failures since the last success.
    """

    is_healthy: bool = True
    last_check: datetime = field(default_factory=lambda: datetime.now(UTC))
    response_time_ms: float = 0.0
    error_count: int = 0
    consecutive_failures: int = 0

    def record_success(self, response_time_ms: float) -> None:
        self.is_healthy = True
        self.last_check = datetime.now(UTC)
        self.response_time_ms = response_time_ms
        self.consecutive_failures = 0

    def record_failure(self, response_time_ms: float) -> None:
        self.is_healthy = False
        self.last_check = datetime.now(UTC)
        self.response_time_ms = response_time_ms
        self.error_count += 1
        self.consecutive_failures += 1

    def reset(self) -> None:
        """Operator override: forget the current failure streak."""
        self.is_healthy = True
        self.last_check = datetime.now(UTC)
        self.consecutive_failures = 0
