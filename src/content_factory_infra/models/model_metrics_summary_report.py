# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Summary of every metric series over a window."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.models.model_metric_summary import ModelMetricSummary

__all__: list[str] = ["ModelMetricsSummaryReport"]


class ModelMetricsSummaryReport(BaseModel):
    """Result of ``MetricsStore.get_metrics_summary``.

    Series without points inside the window are omitted from ``metrics``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    generated_at: datetime
    window_seconds: float = Field(gt=0)
    total_metrics: int = Field(ge=0, description="Number of series summarised")
    metrics: dict[str, ModelMetricSummary] = Field(default_factory=dict)
