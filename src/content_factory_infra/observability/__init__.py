# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Observability: metrics store, monitoring and Prometheus exposition.

Exports:
    MetricsStore: Bounded in-memory time series with windowed summaries
    compute_percentile: Nearest-rank percentile over sorted values
    summarize_points: Count, average, extremes and p95 of metric points
    MonitoringConfig: Monitoring thresholds, intervals and channels
    MonitoringService: Health checks, alerting and error tracking
    PrometheusExporter: Renders monitoring state in the text format
"""

from content_factory_infra.observability.metrics_store import (
    MetricsStore,
    compute_percentile,
    summarize_points,
)
from content_factory_infra.observability.monitoring_config import MonitoringConfig
from content_factory_infra.observability.monitoring_service import MonitoringService
from content_factory_infra.observability.prometheus_metrics import PrometheusExporter

__all__: list[str] = [
    "MetricsStore",
    "MonitoringConfig",
    "MonitoringService",
    "PrometheusExporter",
    "compute_percentile",
    "summarize_points",
]
