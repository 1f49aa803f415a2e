# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""In-process Metrics Store.

Time-bounded, multi-series numeric store with percentile summaries:
- Named series of ``ModelMetricPoint`` held in ``collections.deque``
- Pruning by age and by a hard per-series entry cap on every write
- Windowed summaries (count/avg/min/max/p95) computed on demand
- Domain recorders for API, database, AI service and integration calls that
  also keep raw records for per-endpoint/operation/service/platform
  breakdowns

Memory is bounded by ``retention_seconds * rate``, capped by
``max_entries_per_series``. Old data is dropped silently; recording never
blocks and never raises for valid numbers.

The store is process-local and volatile. Multi-instance deployments get
independent stores per instance.
"""

from __future__ import annotations

import logging
import math
import time
from collections import defaultdict, deque
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional, TypeVar

from content_factory_infra.models import (
    ModelDomainBreakdown,
    ModelDomainOverview,
    ModelMetricPoint,
    ModelMetricSummary,
    ModelMetricsSummaryReport,
)

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 7 * 24 * 3600.0
DEFAULT_MAX_ENTRIES = 5000


def compute_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """Nearest-rank style percentile over already sorted values.

    Returns 0.0 for an empty sequence and the element itself for a single
    value; otherwise index ``floor(p * n) - 1`` clamped to ``[0, n - 1]``.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return float(sorted_values[0])
    index = min(n - 1, max(0, math.floor(percentile * n) - 1))
    return float(sorted_values[index])


def summarize_points(points: Sequence[ModelMetricPoint]) -> ModelMetricSummary:
    if not points:
        return ModelMetricSummary()
    values = sorted(point.value for point in points)
    unit = next((point.unit for point in points if point.unit), None)
    return ModelMetricSummary(
        count=len(values),
        avg=sum(values) / len(values),
        min=values[0],
        max=values[-1],
        p95=compute_percentile(values, 0.95),
        unit=unit,
    )


@dataclass(frozen=True, slots=True)
class _ApiRecord:
    timestamp: float
    endpoint: str
    method: str
    response_time_ms: float
    status_code: int


@dataclass(frozen=True, slots=True)
class _DatabaseRecord:
    timestamp: float
    operation: str
    duration_ms: float
    success: bool


@dataclass(frozen=True, slots=True)
class _AiServiceRecord:
    timestamp: float
    service: str
    operation: str
    duration_ms: float
    success: bool
    tokens_used: Optional[int]


@dataclass(frozen=True, slots=True)
class _IntegrationRecord:
    timestamp: float
    platform: str
    operation: str
    duration_ms: float
    success: bool


R = TypeVar("R", _ApiRecord, _DatabaseRecord, _AiServiceRecord, _IntegrationRecord)


class MetricsStore:
    """Bounded rolling metrics store.

    Args:
        retention_seconds: Maximum age of kept points and records.
        max_entries_per_series: Hard cap per series and per raw record list.
        clock: Wall clock in epoch seconds. Injectable for tests.
    """

    def __init__(
        self,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        max_entries_per_series: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if retention_seconds <= 0:
            raise ValueError(f"retention_seconds must be > 0, got {retention_seconds}")
        if max_entries_per_series < 1:
            raise ValueError(
                f"max_entries_per_series must be >= 1, got {max_entries_per_series}"
            )
        self.retention_seconds = retention_seconds
        self.max_entries_per_series = max_entries_per_series
        self._clock = clock

        self._series: dict[str, deque[ModelMetricPoint]] = defaultdict(deque)
        self._api_records: deque[_ApiRecord] = deque()
        self._database_records: deque[_DatabaseRecord] = deque()
        self._ai_records: deque[_AiServiceRecord] = deque()
        self._integration_records: deque[_IntegrationRecord] = deque()

    # ------------------------------------------------------------------
    # Generic series
    # ------------------------------------------------------------------

    def _now_for(self, records: deque) -> float:
        now = self._clock()
        if records and records[-1].timestamp > now:
            # Wall clock stepped backwards; keep insertion order monotonic.
            return records[-1].timestamp
        return now

    def _prune(self, records: deque, now: float) -> None:
        cutoff = now - self.retention_seconds
        while records and records[0].timestamp < cutoff:
            records.popleft()
        while len(records) > self.max_entries_per_series:
            records.popleft()

    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Mapping[str, object]] = None,
        unit: Optional[str] = None,
    ) -> ModelMetricPoint:
        """Append a point to ``name`` and prune the series in the same call."""
        series = self._series[name]
        now = self._now_for(series)
        normalized = (
            {key: "unknown" if tag is None else str(tag) for key, tag in tags.items()}
            if tags
            else {}
        )
        point = ModelMetricPoint(
            timestamp=now, value=float(value), tags=normalized, unit=unit
        )
        series.append(point)
        self._prune(series, now)
        return point

    def get_series(self, name: str) -> list[ModelMetricPoint]:
        return list(self._series.get(name, ()))

    def series_names(self) -> list[str]:
        return sorted(name for name, points in self._series.items() if points)

    @property
    def total_series(self) -> int:
        return sum(1 for points in self._series.values() if points)

    def _in_window(self, records: Iterable[R], window_seconds: float) -> list[R]:
        cutoff = self._clock() - window_seconds
        return [record for record in records if record.timestamp >= cutoff]

    def get_metric_summary(
        self, name: str, window_seconds: float
    ) -> ModelMetricSummary:
        points = self._in_window(self._series.get(name, ()), window_seconds)
        return summarize_points(points)

    def get_metrics_summary(self, window_seconds: float) -> ModelMetricsSummaryReport:
        """Summarise every series over ``[now - window_seconds, now]``.

        Series with no in-window points are omitted.
        """
        metrics: dict[str, ModelMetricSummary] = {}
        for name, series in self._series.items():
            points = self._in_window(series, window_seconds)
            if points:
                metrics[name] = summarize_points(points)
        return ModelMetricsSummaryReport(
            generated_at=datetime.now(UTC),
            window_seconds=window_seconds,
            total_metrics=len(metrics),
            metrics=metrics,
        )

    def prune(self) -> int:
        """Sweep every series and raw record list; drop idle empty series.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        removed = 0
        for name in list(self._series):
            series = self._series[name]
            before = len(series)
            self._prune(series, now)
            removed += before - len(series)
            if not series:
                del self._series[name]
        for records in (
            self._api_records,
            self._database_records,
            self._ai_records,
            self._integration_records,
        ):
            before = len(records)
            self._prune(records, now)
            removed += before - len(records)
        if removed:
            logger.debug(f"Pruned {removed} expired metric entries")
        return removed

    def clear(self) -> None:
        self._series.clear()
        self._api_records.clear()
        self._database_records.clear()
        self._ai_records.clear()
        self._integration_records.clear()

    # ------------------------------------------------------------------
    # Domain recorders
    # ------------------------------------------------------------------

    def _append_record(self, records: deque, record: R) -> None:
        records.append(record)
        self._prune(records, record.timestamp)

    def record_api_response_time(
        self,
        endpoint: str,
        method: str,
        response_time_ms: float,
        status_code: int,
    ) -> None:
        method = method.upper()
        self._append_record(
            self._api_records,
            _ApiRecord(
                timestamp=self._now_for(self._api_records),
                endpoint=endpoint,
                method=method,
                response_time_ms=float(response_time_ms),
                status_code=status_code,
            ),
        )
        tags = {"endpoint": endpoint, "method": method, "status": status_code}
        self.record_metric("api_response_time", response_time_ms, tags, unit="ms")
        self.record_metric(
            "api_request_count", 1, {**tags, "success": status_code < 400}
        )

    def record_database_metrics(
        self,
        operation: str,
        duration_ms: float,
        success: bool,
        error: Optional[str] = None,
    ) -> None:
        self._append_record(
            self._database_records,
            _DatabaseRecord(
                timestamp=self._now_for(self._database_records),
                operation=operation,
                duration_ms=float(duration_ms),
                success=success,
            ),
        )
        self.record_metric(
            "database_operation_duration",
            duration_ms,
            {"operation": operation, "success": success},
            unit="ms",
        )
        if not success:
            tags: dict[str, object] = {"operation": operation}
            if error:
                tags["error"] = error
            self.record_metric("database_operation_error", 1, tags)

    def record_ai_service_metrics(
        self,
        service: str,
        operation: str,
        duration_ms: float,
        success: bool,
        tokens_used: Optional[int] = None,
    ) -> None:
        self._append_record(
            self._ai_records,
            _AiServiceRecord(
                timestamp=self._now_for(self._ai_records),
                service=service,
                operation=operation,
                duration_ms=float(duration_ms),
                success=success,
                tokens_used=tokens_used,
            ),
        )
        tags = {"service": service, "operation": operation}
        self.record_metric(
            "ai_service_duration", duration_ms, {**tags, "success": success}, unit="ms"
        )
        if tokens_used is not None:
            self.record_metric("ai_tokens_used", tokens_used, tags)
        if not success:
            self.record_metric("ai_service_error", 1, tags)

    def record_integration_metrics(
        self,
        platform: str,
        operation: str,
        duration_ms: float,
        success: bool,
    ) -> None:
        self._append_record(
            self._integration_records,
            _IntegrationRecord(
                timestamp=self._now_for(self._integration_records),
                platform=platform,
                operation=operation,
                duration_ms=float(duration_ms),
                success=success,
            ),
        )
        tags = {"platform": platform, "operation": operation}
        self.record_metric(
            "integration_operation_duration",
            duration_ms,
            {**tags, "success": success},
            unit="ms",
        )
        if not success:
            self.record_metric("integration_operation_error", 1, tags)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @staticmethod
    def _overview(
        dimension: str,
        rows: Sequence[tuple[str, float, bool, Optional[str], int]],
    ) -> ModelDomainOverview:
        """Build an overview from ``(key, duration_ms, success, method, tokens)`` rows."""
        if not rows:
            return ModelDomainOverview(dimension=dimension)

        durations = sorted(row[1] for row in rows)
        count = len(rows)
        failures = sum(1 for row in rows if not row[2])

        grouped: dict[str, list[tuple[str, float, bool, Optional[str], int]]] = {}
        for row in rows:
            grouped.setdefault(row[0], []).append(row)

        breakdown: dict[str, ModelDomainBreakdown] = {}
        for key, group in grouped.items():
            group_failures = sum(1 for row in group if not row[2])
            methods = sorted({row[3] for row in group if row[3]})
            breakdown[key] = ModelDomainBreakdown(
                count=len(group),
                avg_duration_ms=sum(row[1] for row in group) / len(group),
                error_rate=group_failures / len(group) * 100,
                methods=methods,
                tokens_used=sum(row[4] for row in group),
            )

        return ModelDomainOverview(
            dimension=dimension,
            total=count,
            avg_duration_ms=sum(durations) / count,
            p95_duration_ms=compute_percentile(durations, 0.95),
            success_rate=(count - failures) / count * 100,
            error_rate=failures / count * 100,
            breakdown=breakdown,
        )

    def get_api_overview(self, window_seconds: float) -> ModelDomainOverview:
        """API calls by endpoint. Status codes >= 400 count as errors."""
        records = self._in_window(self._api_records, window_seconds)
        return self._overview(
            "endpoint",
            [
                (r.endpoint, r.response_time_ms, r.status_code < 400, r.method, 0)
                for r in records
            ],
        )

    def get_database_overview(self, window_seconds: float) -> ModelDomainOverview:
        records = self._in_window(self._database_records, window_seconds)
        return self._overview(
            "operation",
            [(r.operation, r.duration_ms, r.success, None, 0) for r in records],
        )

    def get_ai_overview(self, window_seconds: float) -> ModelDomainOverview:
        records = self._in_window(self._ai_records, window_seconds)
        return self._overview(
            "service",
            [
                (r.service, r.duration_ms, r.success, None, r.tokens_used or 0)
                for r in records
            ],
        )

    def get_integration_overview(self, window_seconds: float) -> ModelDomainOverview:
        records = self._in_window(self._integration_records, window_seconds)
        return self._overview(
            "platform",
            [(r.platform, r.duration_ms, r.success, None, 0) for r in records],
        )


__all__: list[str] = [
    "DEFAULT_MAX_ENTRIES",
    "DEFAULT_RETENTION_SECONDS",
    "MetricsStore",
    "compute_percentile",
    "summarize_points",
]
