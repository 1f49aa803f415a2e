# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Prometheus Metrics Export

Exposes the monitoring service's state in the Prometheus text format for
the ``/metrics`` endpoint. The exporter owns its own ``CollectorRegistry``
so several exporters (for example in tests) never collide in the global
registry. Gauges are refreshed from live state on every ``render()``.

Exported metrics:
- content_factory_health_status (1 healthy, 0.5 degraded, 0 unhealthy)
- content_factory_health_error_rate, content_factory_memory_usage_ratio
- database_circuit_breaker_state (0 closed, 1 half_open, 2 open)
- database_queries / database_pool_connections / database_reconnect_attempts
- monitoring_alerts (resolved/unresolved) and monitoring_errors
- metric_series_summary{metric, stat} for every in-window series
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Gauge,
    Info,
    generate_latest,
)

if TYPE_CHECKING:
    from content_factory_infra.observability.monitoring_service import (
        MonitoringService,
    )

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_WINDOW_SECONDS = 300.0


class MetricType(Enum):
    """Types of exported metrics."""

    GAUGE = "gauge"
    INFO = "info"


@dataclass
class MetricDefinition:
    """Definition of an exported metric."""

    name: str
    description: str
    metric_type: MetricType
    labels: list[str]


METRIC_DEFINITIONS: tuple[MetricDefinition, ...] = (
    MetricDefinition(
        "content_factory_health_status",
        "Overall health (1=healthy, 0.5=degraded, 0=unhealthy)",
        MetricType.GAUGE,
        [],
    ),
    MetricDefinition(
        "content_factory_health_error_rate",
        "Share of failed probes in the last health check",
        MetricType.GAUGE,
        [],
    ),
    MetricDefinition(
        "content_factory_memory_usage_ratio",
        "Process memory share recorded by the last health check",
        MetricType.GAUGE,
        [],
    ),
    MetricDefinition(
        "database_circuit_breaker_state",
        "Circuit breaker state (0=closed, 1=half_open, 2=open)",
        MetricType.GAUGE,
        ["service"],
    ),
    MetricDefinition(
        "database_queries",
        "Queries executed since start, by result",
        MetricType.GAUGE,
        ["result"],
    ),
    MetricDefinition(
        "database_pool_connections",
        "Connections in the pool, by state",
        MetricType.GAUGE,
        ["state"],
    ),
    MetricDefinition(
        "database_reconnect_attempts",
        "Reconnect attempts in the current outage",
        MetricType.GAUGE,
        [],
    ),
    MetricDefinition(
        "monitoring_alerts",
        "Alerts currently retained, by resolution",
        MetricType.GAUGE,
        ["resolved"],
    ),
    MetricDefinition(
        "monitoring_errors",
        "Error records currently retained",
        MetricType.GAUGE,
        [],
    ),
    MetricDefinition(
        "metric_series_summary",
        "Windowed summary of an in-process metric series",
        MetricType.GAUGE,
        ["metric", "stat"],
    ),
    MetricDefinition(
        "content_factory_build",
        "Service version and environment",
        MetricType.INFO,
        [],
    ),
)


class PrometheusExporter:
    """Render monitoring state as Prometheus exposition text.

    Args:
        monitoring: Service whose state is exported.
        registry: Registry to register into. A private one by default.
        summary_window_seconds: Window of the per-series summaries.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        monitoring: MonitoringService,
        registry: Optional[CollectorRegistry] = None,
        summary_window_seconds: float = DEFAULT_SUMMARY_WINDOW_SECONDS,
    ) -> None:
        self._monitoring = monitoring
        self._registry = registry or CollectorRegistry()
        self._summary_window_seconds = summary_window_seconds
        self._gauges: dict[str, Gauge] = {}
        self._infos: dict[str, Info] = {}

        for definition in METRIC_DEFINITIONS:
            if definition.metric_type is MetricType.INFO:
                self._infos[definition.name] = Info(
                    definition.name,
                    definition.description,
                    definition.labels,
                    registry=self._registry,
                )
            else:
                self._gauges[definition.name] = Gauge(
                    definition.name,
                    definition.description,
                    definition.labels,
                    registry=self._registry,
                )

        config = monitoring.config
        self._info("content_factory_build").info(
            {
                "version": config.app_version,
                "environment": config.environment,
                "service": config.service_name,
            }
        )
        logger.debug("Prometheus exporter initialized")

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def _gauge(self, name: str) -> Gauge:
        return self._gauges[name]

    def _info(self, name: str) -> Info:
        return self._infos[name]

    def refresh(self) -> None:
        """Copy current monitoring state into the gauges."""
        monitoring = self._monitoring

        latest = monitoring.get_health_status()
        if latest is not None:
            self._gauge("content_factory_health_status").set(latest.status.gauge_value)
            self._gauge("content_factory_health_error_rate").set(latest.error_rate)
            self._gauge("content_factory_memory_usage_ratio").set(latest.memory_usage)

        stats = monitoring.get_monitoring_stats()
        alerts = self._gauge("monitoring_alerts")
        alerts.labels(resolved="false").set(stats.unresolved_alerts)
        alerts.labels(resolved="true").set(stats.total_alerts - stats.unresolved_alerts)
        self._gauge("monitoring_errors").set(stats.total_errors)

        manager = monitoring.connection_manager
        if manager is not None:
            status = manager.get_status()
            breaker = status.circuit_breaker
            self._gauge("database_circuit_breaker_state").labels(
                service=breaker.service_name
            ).set(breaker.state.gauge_value)
            queries = self._gauge("database_queries")
            queries.labels(result="successful").set(status.metrics.successful_queries)
            queries.labels(result="failed").set(status.metrics.failed_queries)
            pool = self._gauge("database_pool_connections")
            pool.labels(state="total").set(status.pool_size or 0)
            pool.labels(state="idle").set(status.pool_idle or 0)
            self._gauge("database_reconnect_attempts").set(
                status.metrics.reconnect_attempts
            )

        series = self._gauge("metric_series_summary")
        series.clear()
        report = monitoring.metrics_store.get_metrics_summary(
            self._summary_window_seconds
        )
        for name, summary in report.metrics.items():
            series.labels(metric=name, stat="count").set(summary.count)
            series.labels(metric=name, stat="avg").set(summary.avg)
            series.labels(metric=name, stat="p95").set(summary.p95)

    def render(self) -> bytes:
        """Refresh the gauges and return the exposition text."""
        self.refresh()
        return generate_latest(self._registry)


__all__: list[str] = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricType",
    "PrometheusExporter",
]
