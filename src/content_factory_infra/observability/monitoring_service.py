# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Production Monitoring and Alerting Service.

Runs periodic health checks over the system's dependencies, keeps bounded
in-memory histories of health records, alerts and errors, raises alerts on
threshold breaches and custom metric rules, and fans alerts out to the
configured channels.

Health Check:
    Five probes run concurrently: ``database`` (connection manager
    ``test_connection``), ``ai_service`` (``GEMINI_API_KEY``),
    ``authentication`` (Stack Auth variables), ``integration``
    (``INTEGRATION_ENCRYPTION_SECRET`` of at least 32 characters) and
    ``system`` (process memory and CPU below their thresholds). With
    ``error_rate = failed / total`` the status is ``unhealthy`` above 0.5,
    ``degraded`` above 0.2 and ``healthy`` otherwise.

Alert Channels:
    - console: always, through ``logging`` at the alert type's level
    - webhook: when ``MonitoringConfig.webhook_url`` is set
    - email: when ``MonitoringConfig.email_endpoint`` is set

    Remote deliveries run as background tasks, are rate limited per alert
    type with a sliding window and never propagate failures.

Retention:
    Histories are pruned by age (``retention_seconds``) and by count
    (``max_entries``) on every write, and swept by ``cleanup()`` on the
    cleanup interval of the monitoring loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
import traceback
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Optional, Protocol, TypeVar
from uuid import UUID

import psutil

from content_factory_infra.enums import (
    EnumAlertType,
    EnumHealthStatus,
    EnumInfraTransportType,
    EnumSystemErrorType,
)
from content_factory_infra.errors import (
    InfraConnectionError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from content_factory_infra.handlers.handler_alert_email import HandlerAlertEmail
from content_factory_infra.handlers.handler_alert_webhook import HandlerAlertWebhook
from content_factory_infra.models import (
    ModelAlert,
    ModelAlertDeliveryResult,
    ModelAlertRule,
    ModelDashboardData,
    ModelHealthMetrics,
    ModelHealthTrends,
    ModelMonitoringStats,
    ModelSystemError,
)
from content_factory_infra.observability.metrics_store import MetricsStore
from content_factory_infra.observability.monitoring_config import MonitoringConfig
from content_factory_infra.utils import sanitize_error_message, sanitize_error_string

if TYPE_CHECKING:
    from content_factory_infra.infrastructure.database_connection_manager import (
        DatabaseConnectionManager,
    )

logger = logging.getLogger(__name__)

AUTH_ENV_VARS: tuple[str, ...] = (
    "VITE_STACK_PROJECT_ID",
    "VITE_STACK_PUBLISHABLE_CLIENT_KEY",
    "STACK_SECRET_SERVER_KEY",
)
MIN_ENCRYPTION_SECRET_LENGTH = 32

UNHEALTHY_ERROR_RATE = 0.5
DEGRADED_ERROR_RATE = 0.2

# Probe name, error attribution and the message recorded when it fails
_PROBES: tuple[tuple[str, EnumSystemErrorType, str], ...] = (
    ("database", EnumSystemErrorType.DATABASE, "Database health check failed"),
    ("ai_service", EnumSystemErrorType.AI_SERVICE, "AI service health check failed"),
    (
        "authentication",
        EnumSystemErrorType.AUTHENTICATION,
        "Authentication health check failed",
    ),
    (
        "integration",
        EnumSystemErrorType.INTEGRATION,
        "Integration health check failed",
    ),
    ("system", EnumSystemErrorType.APPLICATION, "System health check failed"),
)


class ProtocolAlertChannel(Protocol):
    """Remote alert channel (webhook, email relay, ...)."""

    channel: str

    async def handle(self, alert: ModelAlert) -> ModelAlertDeliveryResult: ...


def process_memory_share() -> float:
    """Resident memory of this process as a share of system memory."""
    total = psutil.virtual_memory().total
    if total <= 0:
        return 0.0
    return psutil.Process().memory_info().rss / total


def system_cpu_share() -> float:
    """System-wide CPU utilisation since the previous call (0..1)."""
    return psutil.cpu_percent(interval=None) / 100.0


def status_for_error_rate(error_rate: float) -> EnumHealthStatus:
    if error_rate > UNHEALTHY_ERROR_RATE:
        return EnumHealthStatus.UNHEALTHY
    if error_rate > DEGRADED_ERROR_RATE:
        return EnumHealthStatus.DEGRADED
    return EnumHealthStatus.HEALTHY


def _utcnow() -> datetime:
    return datetime.now(UTC)


R = TypeVar("R", ModelAlert, ModelSystemError)


def _newest_first(items: Iterable[R]) -> list[R]:
    # Later insertion wins timestamp ties
    return sorted(reversed(list(items)), key=lambda item: item.timestamp, reverse=True)


def _probe_context(target: str) -> ModelInfraErrorContext:
    return ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.RUNTIME,
        operation="health_check",
        target_name=target,
    )


class MonitoringService:
    """Health checks, alerting and error tracking for one process.

    Args:
        config: Monitoring configuration. Defaults to environment values.
        metrics_store: Store used for dashboards and alert rules.
        connection_manager: Database manager probed by the health check.
        channels: Remote alert channels. Built from ``config`` when omitted.
        memory_sampler: Returns the process memory share (0..1).
        cpu_sampler: Returns the CPU share (0..1).
        clock: Monotonic clock for durations, uptime and rate limiting.
        now: Wall clock for record timestamps and retention.
        sleep: Awaitable sleep used by the monitoring loop.
    """

    def __init__(
        self,
        config: Optional[MonitoringConfig] = None,
        metrics_store: Optional[MetricsStore] = None,
        connection_manager: Optional[DatabaseConnectionManager] = None,
        channels: Optional[Sequence[ProtocolAlertChannel]] = None,
        memory_sampler: Callable[[], float] = process_memory_share,
        cpu_sampler: Callable[[], float] = system_cpu_share,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or MonitoringConfig.from_environment()
        self.metrics_store = metrics_store or MetricsStore(
            retention_seconds=self.config.retention_seconds,
            max_entries_per_series=self.config.max_entries,
        )
        self.connection_manager = connection_manager
        self.channels: list[ProtocolAlertChannel] = (
            list(channels) if channels is not None else self._default_channels()
        )
        self._memory_sampler = memory_sampler
        self._cpu_sampler = cpu_sampler
        self._clock = clock
        self._now = now
        self._sleep = sleep

        self._started_at = clock()
        self._health_history: deque[ModelHealthMetrics] = deque()
        self._alerts: dict[UUID, ModelAlert] = {}
        self._errors: deque[ModelSystemError] = deque()
        self._alert_rules: dict[UUID, ModelAlertRule] = {}

        self._monitor_task: Optional[asyncio.Task[None]] = None
        self._delivery_tasks: set[asyncio.Task[list[ModelAlertDeliveryResult]]] = set()

        # Sliding-window delivery rate limit per alert type
        self._alert_timestamps: dict[EnumAlertType, list[float]] = defaultdict(list)
        self._rate_limit_lock = asyncio.Lock()

    def _default_channels(self) -> list[ProtocolAlertChannel]:
        channels: list[ProtocolAlertChannel] = []
        if self.config.webhook_url:
            channels.append(
                HandlerAlertWebhook(
                    webhook_url=self.config.webhook_url,
                    service_name=self.config.service_name,
                    environment=self.config.environment,
                    timeout=self.config.channel_timeout_seconds,
                )
            )
        if self.config.email_endpoint:
            channels.append(
                HandlerAlertEmail(
                    endpoint=self.config.email_endpoint,
                    service_name=self.config.service_name,
                    environment=self.config.environment,
                    timeout=self.config.channel_timeout_seconds,
                )
            )
        return channels

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    def start(self) -> asyncio.Task[None]:
        """Start (or return) the monitoring loop task.

        The loop runs a health check immediately, then every
        ``health_check_interval_seconds``; ``cleanup()`` runs every
        ``cleanup_interval_seconds``.
        """
        if self._monitor_task is not None and not self._monitor_task.done():
            logger.debug("Monitoring already active")
            return self._monitor_task
        self._monitor_task = asyncio.create_task(
            self._monitor_loop(), name="production-monitoring"
        )
        logger.info(
            f"Production monitoring started "
            f"(interval: {self.config.health_check_interval_seconds}s)",
            extra={"environment": self.config.environment},
        )
        return self._monitor_task

    async def stop(self) -> None:
        task, self._monitor_task = self._monitor_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Production monitoring stopped")

    async def shutdown(self) -> None:
        """Stop the loop and wait for in-flight alert deliveries."""
        await self.stop()
        await self.flush_deliveries()

    async def flush_deliveries(self) -> None:
        if self._delivery_tasks:
            await asyncio.gather(*list(self._delivery_tasks), return_exceptions=True)

    async def _monitor_loop(self) -> None:
        last_cleanup = self._clock()
        while True:
            try:
                await self.perform_health_check()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("Health check failed")
                self.record_error(
                    EnumSystemErrorType.APPLICATION, "Health check failed", e
                )

            if self._clock() - last_cleanup >= self.config.cleanup_interval_seconds:
                self.cleanup()
                last_cleanup = self._clock()

            await self._sleep(self.config.health_check_interval_seconds)

    def install_loop_exception_handler(
        self, loop: Optional[asyncio.AbstractEventLoop] = None
    ) -> None:
        """Record unhandled task exceptions of ``loop`` as application errors."""
        target = loop or asyncio.get_running_loop()

        def handler(
            event_loop: asyncio.AbstractEventLoop, context: dict[str, object]
        ) -> None:
            exc = context.get("exception")
            message = str(context.get("message") or "Unhandled exception in event loop")
            self.record_error(
                EnumSystemErrorType.APPLICATION,
                message,
                exc if isinstance(exc, BaseException) else None,
            )
            event_loop.default_exception_handler(context)

        target.set_exception_handler(handler)

    # ------------------------------------------------------------------
    # Health checks
    # ------------------------------------------------------------------

    async def perform_health_check(self) -> ModelHealthMetrics:
        """Run all probes concurrently and record the result."""
        start = self._clock()
        memory_usage = self._sample(self._memory_sampler, "memory")
        cpu_usage = self._sample(self._cpu_sampler, "cpu")

        results = await asyncio.gather(
            self._check_database(),
            self._check_ai_service(),
            self._check_authentication(),
            self._check_integration(),
            self._check_system(memory_usage, cpu_usage),
            return_exceptions=True,
        )
        response_time_ms = (self._clock() - start) * 1000

        checks: dict[str, bool] = {}
        failed: list[str] = []
        for (name, error_type, failure_message), result in zip(_PROBES, results):
            passed = not isinstance(result, BaseException)
            checks[name] = passed
            if not passed:
                failed.append(name)
                self.record_error(error_type, failure_message, result)

        error_rate = len(failed) / len(checks)
        status = status_for_error_rate(error_rate)
        metrics = ModelHealthMetrics(
            timestamp=self._now(),
            status=status,
            response_time_ms=response_time_ms,
            error_rate=error_rate,
            memory_usage=memory_usage,
            active_connections=self._active_connections(),
            checks=checks,
            failed_checks=failed,
        )
        self._health_history.append(metrics)
        self._prune(self._health_history, metrics.timestamp)
        self.metrics_store.record_metric(
            "health_check_duration", response_time_ms, {"status": status.value}, "ms"
        )

        self._check_alert_conditions(metrics)
        self._evaluate_alert_rules()

        if status is EnumHealthStatus.HEALTHY:
            logger.info(f"Health check passed ({response_time_ms:.0f}ms)")
        else:
            logger.warning(
                f"System {status.value} ({response_time_ms:.0f}ms, "
                f"{error_rate * 100:.1f}% error rate)",
                extra={"failed_checks": failed},
            )
        return metrics

    def _sample(self, sampler: Callable[[], float], resource: str) -> float:
        try:
            return max(0.0, float(sampler()))
        except Exception as e:
            logger.warning(
                f"Failed to sample {resource} usage: {sanitize_error_message(e)}"
            )
            return 0.0

    def _active_connections(self) -> int:
        if self.connection_manager is None:
            return 0
        pool = self.connection_manager.pool
        if pool is None:
            return 0
        return max(0, pool.get_size() - pool.get_idle_size())

    async def _check_database(self) -> None:
        if self.connection_manager is None:
            raise InfraConnectionError(
                "Database connection manager not configured",
                context=_probe_context("database"),
            )
        if not self.connection_manager.is_initialized:
            await self.connection_manager.initialize()
        if not await self.connection_manager.test_connection():
            raise InfraConnectionError(
                "Database connection test failed",
                context=_probe_context("database"),
            )

    async def _check_ai_service(self) -> None:
        # Configuration only; no billable API call
        if not os.getenv("GEMINI_API_KEY"):
            raise ProtocolConfigurationError(
                "Gemini API key not configured",
                context=_probe_context("ai_service"),
            )

    async def _check_authentication(self) -> None:
        missing = [name for name in AUTH_ENV_VARS if not os.getenv(name)]
        if missing:
            raise ProtocolConfigurationError(
                f"Missing authentication variables: {', '.join(missing)}",
                context=_probe_context("authentication"),
            )

    async def _check_integration(self) -> None:
        secret = os.getenv("INTEGRATION_ENCRYPTION_SECRET")
        if not secret:
            raise ProtocolConfigurationError(
                "Integration encryption secret not configured",
                context=_probe_context("integration"),
            )
        if len(secret) < MIN_ENCRYPTION_SECRET_LENGTH:
            raise ProtocolConfigurationError(
                "Integration encryption secret too short",
                context=_probe_context("integration"),
            )

    async def _check_system(self, memory_usage: float, cpu_usage: float) -> None:
        if memory_usage > self.config.memory_usage_threshold:
            raise RuntimeHostError(
                f"High memory usage: {memory_usage * 100:.1f}%",
                context=_probe_context("system"),
            )
        if cpu_usage > self.config.cpu_usage_threshold:
            raise RuntimeHostError(
                f"High CPU usage: {cpu_usage * 100:.1f}%",
                context=_probe_context("system"),
            )

    def get_health_status(self) -> Optional[ModelHealthMetrics]:
        """Most recent health record, if any."""
        return self._health_history[-1] if self._health_history else None

    def get_health_metrics(self, hours: float = 24) -> list[ModelHealthMetrics]:
        cutoff = self._now() - timedelta(hours=hours)
        return [m for m in self._health_history if m.timestamp >= cutoff]

    def get_health_trends(self, hours: float = 24) -> Optional[ModelHealthTrends]:
        """Status percentages and error-rate direction over ``hours``.

        Returns None when no health check falls in the window.
        """
        records = self.get_health_metrics(hours)
        total = len(records)
        if total == 0:
            return None

        def percent(status: EnumHealthStatus) -> float:
            return sum(1 for m in records if m.status is status) / total * 100

        direction = "stable"
        if total >= 2:
            half = total // 2
            older = sum(m.error_rate for m in records[:half]) / half
            newer = sum(m.error_rate for m in records[half:]) / (total - half)
            if newer - older > 0.05:
                direction = "degrading"
            elif older - newer > 0.05:
                direction = "improving"

        return ModelHealthTrends(
            hours=hours,
            total_checks=total,
            availability_percent=percent(EnumHealthStatus.HEALTHY),
            degraded_percent=percent(EnumHealthStatus.DEGRADED),
            unhealthy_percent=percent(EnumHealthStatus.UNHEALTHY),
            avg_response_time_ms=sum(m.response_time_ms for m in records) / total,
            avg_error_rate=sum(m.error_rate for m in records) / total,
            direction=direction,
        )

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def _check_alert_conditions(self, metrics: ModelHealthMetrics) -> None:
        cfg = self.config
        if metrics.error_rate > cfg.error_rate_threshold:
            self._raise_threshold_alert(
                EnumAlertType.CRITICAL,
                "High Error Rate",
                f"Error rate is {metrics.error_rate * 100:.1f}% "
                f"(threshold: {cfg.error_rate_threshold * 100:.1f}%)",
                {"error_rate": metrics.error_rate, "threshold": cfg.error_rate_threshold},
            )
        if metrics.response_time_ms > cfg.response_time_threshold_ms:
            self._raise_threshold_alert(
                EnumAlertType.WARNING,
                "Slow Response Time",
                f"Response time is {metrics.response_time_ms:.0f}ms "
                f"(threshold: {cfg.response_time_threshold_ms:.0f}ms)",
                {
                    "response_time_ms": metrics.response_time_ms,
                    "threshold": cfg.response_time_threshold_ms,
                },
            )
        if metrics.memory_usage > cfg.memory_usage_threshold:
            self._raise_threshold_alert(
                EnumAlertType.WARNING,
                "High Memory Usage",
                f"Memory usage is {metrics.memory_usage * 100:.1f}% "
                f"(threshold: {cfg.memory_usage_threshold * 100:.1f}%)",
                {
                    "memory_usage": metrics.memory_usage,
                    "threshold": cfg.memory_usage_threshold,
                },
            )
        if metrics.status is EnumHealthStatus.UNHEALTHY:
            self._raise_threshold_alert(
                EnumAlertType.CRITICAL,
                "System Unhealthy",
                "Multiple system components are failing",
                {"status": metrics.status.value, "error_rate": metrics.error_rate},
            )
        elif metrics.status is EnumHealthStatus.DEGRADED:
            self._raise_threshold_alert(
                EnumAlertType.WARNING,
                "System Degraded",
                "Some system components are experiencing issues",
                {"status": metrics.status.value, "error_rate": metrics.error_rate},
            )

    def _evaluate_alert_rules(self) -> None:
        for rule in list(self._alert_rules.values()):
            if not rule.enabled:
                continue
            summary = self.metrics_store.get_metric_summary(
                rule.metric_name, rule.window_seconds
            )
            if summary.count == 0:
                continue
            if rule.comparison.evaluate(summary.avg, rule.threshold):
                self._raise_threshold_alert(
                    rule.alert_type,
                    rule.name,
                    f"{rule.metric_name} average is {summary.avg:.2f} "
                    f"({rule.comparison.value} {rule.threshold})",
                    {
                        "rule_id": str(rule.id),
                        "metric": rule.metric_name,
                        "observed": summary.avg,
                        "threshold": rule.threshold,
                        "window_seconds": rule.window_seconds,
                    },
                )

    def _has_unresolved(self, title: str) -> bool:
        return any(a.title == title and not a.resolved for a in self._alerts.values())

    def _raise_threshold_alert(
        self,
        alert_type: EnumAlertType,
        title: str,
        message: str,
        metadata: Mapping[str, object],
    ) -> Optional[ModelAlert]:
        if self._has_unresolved(title):
            logger.debug(f"Alert {title!r} already open, not raised again")
            return None
        return self.create_alert(alert_type, title, message, metadata)

    def create_alert(
        self,
        alert_type: EnumAlertType,
        title: str,
        message: str,
        metadata: Optional[Mapping[str, object]] = None,
    ) -> ModelAlert:
        """Store an alert and send it through every channel."""
        alert = ModelAlert(
            type=alert_type,
            title=title,
            message=sanitize_error_string(message),
            timestamp=self._now(),
            metadata=dict(metadata or {}),
        )
        self._alerts[alert.id] = alert
        self._prune_alerts(alert.timestamp)
        self._send_alert(alert)
        return alert

    def _send_alert(self, alert: ModelAlert) -> None:
        logger.log(
            alert.type.log_level,
            f"ALERT [{alert.type.value.upper()}] {alert.title}: {alert.message}",
            extra={
                "alert_id": str(alert.id),
                "alert_type": alert.type.value,
                "alert_metadata": alert.metadata,
            },
        )
        if not self.channels:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop, remote alert delivery skipped",
                extra={"alert_id": str(alert.id)},
            )
            return
        task = loop.create_task(self._deliver(alert), name=f"alert-delivery-{alert.id}")
        self._delivery_tasks.add(task)
        task.add_done_callback(self._delivery_tasks.discard)

    async def _check_rate_limit(self, alert_type: EnumAlertType) -> bool:
        """Return True if another delivery of ``alert_type`` is allowed."""
        now = self._clock()
        async with self._rate_limit_lock:
            cutoff = now - self.config.alert_rate_limit_window_seconds
            timestamps = [ts for ts in self._alert_timestamps[alert_type] if ts > cutoff]
            self._alert_timestamps[alert_type] = timestamps
            if len(timestamps) >= self.config.max_alerts_per_window:
                return False
            timestamps.append(now)
            return True

    async def _deliver(self, alert: ModelAlert) -> list[ModelAlertDeliveryResult]:
        if not await self._check_rate_limit(alert.type):
            logger.warning(
                f"Alert delivery rate limited for type {alert.type.value}",
                extra={"alert_id": str(alert.id), "alert_type": alert.type.value},
            )
            return []

        outcomes = await asyncio.gather(
            *(channel.handle(alert) for channel in self.channels),
            return_exceptions=True,
        )
        results: list[ModelAlertDeliveryResult] = []
        for channel, outcome in zip(self.channels, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    f"Alert channel {channel.channel} raised: "
                    f"{sanitize_error_message(outcome)}",
                    extra={"alert_id": str(alert.id)},
                )
                continue
            if not outcome.success:
                logger.warning(
                    f"Alert channel {channel.channel} failed: {outcome.error}",
                    extra={
                        "alert_id": str(alert.id),
                        "correlation_id": str(outcome.correlation_id),
                    },
                )
            results.append(outcome)
        return results

    def resolve_alert(self, alert_id: UUID | str) -> bool:
        """Resolve an alert. False if unknown or already resolved."""
        try:
            key = alert_id if isinstance(alert_id, UUID) else UUID(str(alert_id))
        except ValueError:
            return False
        alert = self._alerts.get(key)
        if alert is None or alert.resolved:
            return False
        self._alerts[key] = alert.resolve(self._now())
        logger.info(f"Alert resolved: {alert.title}", extra={"alert_id": str(key)})
        return True

    def get_recent_alerts(self, limit: int = 10) -> list[ModelAlert]:
        return _newest_first(list(self._alerts.values()))[: max(0, limit)]

    def get_alert_history(
        self, limit: int = 50, unresolved_only: bool = False
    ) -> list[ModelAlert]:
        alerts = [
            a for a in self._alerts.values() if not (unresolved_only and a.resolved)
        ]
        return _newest_first(alerts)[: max(0, limit)]

    # Alert rules

    def register_alert_rule(self, rule: ModelAlertRule) -> ModelAlertRule:
        self._alert_rules[rule.id] = rule
        logger.info(
            f"Alert rule registered: {rule.name}",
            extra={"rule_id": str(rule.id), "metric": rule.metric_name},
        )
        return rule

    def delete_alert_rule(self, rule_id: UUID) -> bool:
        return self._alert_rules.pop(rule_id, None) is not None

    def list_alert_rules(self) -> list[ModelAlertRule]:
        return list(self._alert_rules.values())

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def record_error(
        self,
        error_type: EnumSystemErrorType | str,
        message: str,
        error: object = None,
        context: Optional[Mapping[str, object]] = None,
        *,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> ModelSystemError:
        """Append an error record and raise the matching alert.

        Database and authentication errors raise ``critical`` alerts, every
        other type raises ``error``.
        """
        error_type = EnumSystemErrorType(error_type)
        metadata: dict[str, object] = dict(context or {})
        stack: Optional[str] = None
        if isinstance(error, BaseException):
            metadata["original_error"] = sanitize_error_message(error)
            if error.__traceback__ is not None:
                stack = sanitize_error_string(
                    "".join(traceback.format_exception(error)), max_length=4000
                )
        elif error is not None:
            metadata["original_error"] = sanitize_error_string(str(error))

        record = ModelSystemError(
            type=error_type,
            message=sanitize_error_string(message),
            stack=stack,
            timestamp=self._now(),
            user_id=user_id,
            request_id=request_id,
            metadata=metadata,
        )
        self._errors.append(record)
        self._prune(self._errors, record.timestamp)

        self.create_alert(
            error_type.alert_type,
            f"{error_type.title} Error",
            record.message,
            {
                "error_type": error_type.value,
                "user_id": user_id,
                "request_id": request_id,
            },
        )
        return record

    def get_recent_errors(self, limit: int = 10) -> list[ModelSystemError]:
        return _newest_first(list(self._errors))[: max(0, limit)]

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _prune(self, records: deque, now: datetime) -> int:
        cutoff = now - timedelta(seconds=self.config.retention_seconds)
        removed = 0
        while records and records[0].timestamp < cutoff:
            records.popleft()
            removed += 1
        while len(records) > self.config.max_entries:
            records.popleft()
            removed += 1
        return removed

    def _prune_alerts(self, now: datetime) -> int:
        cutoff = now - timedelta(seconds=self.config.retention_seconds)
        expired = [key for key, a in self._alerts.items() if a.timestamp < cutoff]
        for key in expired:
            del self._alerts[key]
        overflow = len(self._alerts) - self.config.max_entries
        for key in list(self._alerts)[: max(0, overflow)]:
            del self._alerts[key]
        return len(expired) + max(0, overflow)

    def cleanup(self) -> int:
        """Prune every history and the metrics store; return entries removed."""
        now = self._now()
        removed = (
            self._prune(self._health_history, now)
            + self._prune_alerts(now)
            + self._prune(self._errors, now)
            + self.metrics_store.prune()
        )
        logger.debug(f"Monitoring cleanup removed {removed} entries")
        return removed

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_monitoring_stats(self) -> ModelMonitoringStats:
        latest = self.get_health_status()
        return ModelMonitoringStats(
            is_active=self.is_active,
            uptime_seconds=max(0.0, self._clock() - self._started_at),
            total_metrics=self.metrics_store.total_series,
            total_health_checks=len(self._health_history),
            total_alerts=len(self._alerts),
            unresolved_alerts=sum(1 for a in self._alerts.values() if not a.resolved),
            total_errors=len(self._errors),
            alert_rules=len(self._alert_rules),
            current_status=latest.status if latest else None,
        )

    def get_dashboard_data(self, window_seconds: float = 3600.0) -> ModelDashboardData:
        latest = self.get_health_status()
        store = self.metrics_store
        return ModelDashboardData(
            generated_at=self._now(),
            window_seconds=window_seconds,
            health_status=latest.status if latest else None,
            monitoring_stats=self.get_monitoring_stats(),
            metrics_summary=store.get_metrics_summary(window_seconds),
            api_overview=store.get_api_overview(window_seconds),
            database_overview=store.get_database_overview(window_seconds),
            ai_overview=store.get_ai_overview(window_seconds),
            integration_overview=store.get_integration_overview(window_seconds),
            recent_alerts=self.get_recent_alerts(10),
            recent_errors=self.get_recent_errors(10),
            connection_status=(
                self.connection_manager.get_status()
                if self.connection_manager is not None
                else None
            ),
        )


__all__: list[str] = [
    "AUTH_ENV_VARS",
    "MIN_ENCRYPTION_SECRET_LENGTH",
    "MonitoringService",
    "ProtocolAlertChannel",
    "process_memory_share",
    "status_for_error_rate",
    "system_cpu_share",
]
