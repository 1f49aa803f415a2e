# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Monitoring service counters."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumHealthStatus

__all__: list[str] = ["ModelMonitoringStats"]


class ModelMonitoringStats(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    is_active: bool
    uptime_seconds: float = Field(ge=0)
    total_metrics: int = Field(ge=0, description="Metric series held by the store")
    total_health_checks: int = Field(ge=0)
    total_alerts: int = Field(ge=0)
    unresolved_alerts: int = Field(ge=0)
    total_errors: int = Field(ge=0)
    alert_rules: int = Field(default=0, ge=0)
    current_status: Optional[EnumHealthStatus] = None
