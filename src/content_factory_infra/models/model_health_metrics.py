# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Result of one composite health check."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumHealthStatus

__all__: list[str] = ["ModelHealthMetrics"]


class ModelHealthMetrics(BaseModel):
    """Health record appended by ``MonitoringService.perform_health_check``.

    Attributes:
        timestamp: When the check completed.
        status: Derived from ``error_rate`` (>0.5 unhealthy, >0.2 degraded).
        response_time_ms: Wall time of the whole check.
        error_rate: Failed probes divided by total probes.
        memory_usage: Process RSS as a share of system memory (0..1).
        checks: Probe name to pass/fail.
        failed_checks: Names of probes that failed or raised.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime
    status: EnumHealthStatus
    response_time_ms: float = Field(ge=0)
    error_rate: float = Field(ge=0, le=1)
    memory_usage: float = Field(default=0.0, ge=0)
    active_connections: int = Field(default=0, ge=0)
    checks: dict[str, bool] = Field(default_factory=dict)
    failed_checks: list[str] = Field(default_factory=list)
