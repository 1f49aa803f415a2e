# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Payload of ``MonitoringService.get_dashboard_data``."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumHealthStatus
from content_factory_infra.models.model_alert import ModelAlert
from content_factory_infra.models.model_connection_status import (
    ModelConnectionStatus,
)
from content_factory_infra.models.model_domain_overview import ModelDomainOverview
from content_factory_infra.models.model_metrics_summary_report import (
    ModelMetricsSummaryReport,
)
from content_factory_infra.models.model_monitoring_stats import ModelMonitoringStats
from content_factory_infra.models.model_system_error import ModelSystemError

__all__: list[str] = ["ModelDashboardData"]


class ModelDashboardData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    generated_at: datetime
    window_seconds: float = Field(gt=0)
    health_status: Optional[EnumHealthStatus] = None
    monitoring_stats: ModelMonitoringStats
    metrics_summary: ModelMetricsSummaryReport
    api_overview: ModelDomainOverview
    database_overview: ModelDomainOverview
    ai_overview: ModelDomainOverview
    integration_overview: ModelDomainOverview
    recent_alerts: list[ModelAlert] = Field(default_factory=list)
    recent_errors: list[ModelSystemError] = Field(default_factory=list)
    connection_status: Optional[ModelConnectionStatus] = None
