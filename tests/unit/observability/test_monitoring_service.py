# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for MonitoringService.

Tests cover:
- Health status derivation from the probe error rate
- Probe outcomes with and without a database connection manager
- Threshold alerts, de-duplication and resolution
- Error recording severity and sanitization
- Custom alert rules over the metrics store
- Remote channel fan-out, failure isolation and rate limiting
- Retention, trends, dashboard data and the monitoring loop
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from content_factory_infra.enums import (
    EnumAlertComparison,
    EnumAlertType,
    EnumHealthStatus,
    EnumSystemErrorType,
)
from content_factory_infra.infrastructure import (
    ConnectionConfig,
    DatabaseConnectionManager,
)
from content_factory_infra.models import (
    ModelAlert,
    ModelAlertDeliveryResult,
    ModelAlertRule,
)
from content_factory_infra.observability import (
    MetricsStore,
    MonitoringConfig,
    MonitoringService,
)
from content_factory_infra.observability.monitoring_service import (
    status_for_error_rate,
)
from tests.helpers.db_fakes import FakePoolFactory, ManualClock, RecordingSleep


class SettableNow:
    """Wall clock that only moves when told to."""

    def __init__(self) -> None:
        self.value = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.value

    def advance(self, **kwargs: float) -> None:
        self.value += timedelta(**kwargs)


class FakeChannel:
    """Alert channel recording every alert it is handed."""

    channel = "fake"

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.received: list[ModelAlert] = []
        self.fail_with = fail_with

    async def handle(self, alert: ModelAlert) -> ModelAlertDeliveryResult:
        self.received.append(alert)
        if self.fail_with is not None:
            raise self.fail_with
        return ModelAlertDeliveryResult(
            channel=self.channel, success=True, status_code=200, correlation_id=uuid4()
        )


@pytest.fixture
def wall_clock() -> SettableNow:
    return SettableNow()


@pytest.fixture
def monitoring_config() -> MonitoringConfig:
    return MonitoringConfig(environment="test")


@pytest.fixture
def make_service(
    monitoring_config: MonitoringConfig,
    manual_clock: ManualClock,
    wall_clock: SettableNow,
    recording_sleep: RecordingSleep,
) -> Callable[..., MonitoringService]:
    def _make(**overrides: object) -> MonitoringService:
        kwargs: dict[str, object] = {
            "config": monitoring_config,
            "channels": [],
            "memory_sampler": lambda: 0.1,
            "cpu_sampler": lambda: 0.1,
            "clock": manual_clock,
            "now": wall_clock,
            "sleep": recording_sleep,
        }
        kwargs.update(overrides)
        return MonitoringService(**kwargs)  # type: ignore[arg-type]

    return _make


def _titles(service: MonitoringService) -> list[str]:
    return [a.title for a in service.get_alert_history(limit=100)]


class TestStatusForErrorRate:
    """Tests for the error-rate to status mapping."""

    @pytest.mark.parametrize(
        ("error_rate", "expected"),
        [
            (0.0, EnumHealthStatus.HEALTHY),
            (0.2, EnumHealthStatus.HEALTHY),
            (0.21, EnumHealthStatus.DEGRADED),
            (0.5, EnumHealthStatus.DEGRADED),
            (0.6, EnumHealthStatus.UNHEALTHY),
            (1.0, EnumHealthStatus.UNHEALTHY),
        ],
    )
    def test_boundaries(self, error_rate: float, expected: EnumHealthStatus) -> None:
        assert status_for_error_rate(error_rate) is expected


class TestPerformHealthCheck:
    """Tests for the five-probe health check."""

    @pytest.mark.asyncio
    async def test_all_probes_pass(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
        connection_config: ConnectionConfig,
        pool_factory: FakePoolFactory,
        recording_sleep: RecordingSleep,
        manual_clock: ManualClock,
    ) -> None:
        manager = DatabaseConnectionManager(
            connection_config,
            pool_factory=pool_factory,
            sleep=recording_sleep,
            clock=manual_clock,
        )
        service = make_service(connection_manager=manager)

        metrics = await service.perform_health_check()

        assert metrics.status is EnumHealthStatus.HEALTHY
        assert metrics.error_rate == 0.0
        assert metrics.failed_checks == []
        assert set(metrics.checks) == {
            "database",
            "ai_service",
            "authentication",
            "integration",
            "system",
        }
        assert all(metrics.checks.values())
        # Pool of 5 with 3 idle
        assert metrics.active_connections == 2
        # Pool is created lazily by the database probe
        assert manager.is_initialized
        assert service.get_recent_alerts() == []
        assert service.get_health_status() == metrics

    @pytest.mark.asyncio
    async def test_missing_configuration_is_unhealthy(
        self,
        clean_health_env: Callable[..., None],
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service()

        metrics = await service.perform_health_check()

        assert metrics.status is EnumHealthStatus.UNHEALTHY
        assert metrics.error_rate == pytest.approx(0.8)
        assert set(metrics.failed_checks) == {
            "database",
            "ai_service",
            "authentication",
            "integration",
        }
        assert metrics.checks["system"] is True

        titles = _titles(service)
        assert "Database Error" in titles
        assert "Ai Service Error" in titles
        assert "High Error Rate" in titles
        assert "System Unhealthy" in titles
        assert {e.type for e in service.get_recent_errors()} == {
            EnumSystemErrorType.DATABASE,
            EnumSystemErrorType.AI_SERVICE,
            EnumSystemErrorType.AUTHENTICATION,
            EnumSystemErrorType.INTEGRATION,
        }

    @pytest.mark.asyncio
    async def test_one_failure_in_five_is_still_healthy(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service()

        metrics = await service.perform_health_check()

        assert metrics.failed_checks == ["database"]
        assert metrics.status is EnumHealthStatus.HEALTHY
        assert "High Error Rate" in _titles(service)

    @pytest.mark.asyncio
    async def test_memory_pressure_degrades(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service(memory_sampler=lambda: 0.9)

        metrics = await service.perform_health_check()

        assert set(metrics.failed_checks) == {"database", "system"}
        assert metrics.status is EnumHealthStatus.DEGRADED
        assert metrics.memory_usage == pytest.approx(0.9)
        titles = _titles(service)
        assert "High Memory Usage" in titles
        assert "System Degraded" in titles

    @pytest.mark.asyncio
    async def test_cpu_threshold_fails_system_probe(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service(cpu_sampler=lambda: 0.95)

        metrics = await service.perform_health_check()

        assert metrics.checks["system"] is False

    @pytest.mark.asyncio
    async def test_short_encryption_secret_fails_integration(
        self,
        fully_configured_env: None,
        clean_health_env: Callable[..., None],
        make_service: Callable[..., MonitoringService],
    ) -> None:
        clean_health_env(INTEGRATION_ENCRYPTION_SECRET="short")
        service = make_service()

        metrics = await service.perform_health_check()

        assert metrics.checks["integration"] is False

    @pytest.mark.asyncio
    async def test_failing_sampler_reads_as_zero(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        def broken() -> float:
            raise OSError("procfs unavailable")

        service = make_service(memory_sampler=broken)

        metrics = await service.perform_health_check()

        assert metrics.memory_usage == 0.0
        assert metrics.checks["system"] is True

    @pytest.mark.asyncio
    async def test_duration_recorded_in_metrics_store(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        store = MetricsStore()
        service = make_service(metrics_store=store)

        await service.perform_health_check()

        summary = store.get_metric_summary("health_check_duration", 300)
        assert summary.count == 1
        assert summary.unit == "ms"


class TestAlerts:
    """Tests for threshold alerts, de-duplication and resolution."""

    @pytest.mark.asyncio
    async def test_threshold_alert_not_repeated_while_open(
        self,
        clean_health_env: Callable[..., None],
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service()

        await service.perform_health_check()
        await service.perform_health_check()

        titles = _titles(service)
        assert titles.count("High Error Rate") == 1
        assert titles.count("System Unhealthy") == 1
        # Recorded errors are not de-duplicated
        assert titles.count("Database Error") == 2

    @pytest.mark.asyncio
    async def test_threshold_alert_raised_again_after_resolution(
        self,
        clean_health_env: Callable[..., None],
        make_service: Callable[..., MonitoringService],
    ) -> None:
        service = make_service()
        await service.perform_health_check()
        first = next(
            a for a in service.get_alert_history() if a.title == "High Error Rate"
        )

        assert service.resolve_alert(first.id) is True
        await service.perform_health_check()

        matching = [
            a for a in service.get_alert_history() if a.title == "High Error Rate"
        ]
        assert len(matching) == 2
        assert sum(1 for a in matching if not a.resolved) == 1

    def test_resolve_alert(
        self,
        make_service: Callable[..., MonitoringService],
        wall_clock: SettableNow,
    ) -> None:
        service = make_service()
        alert = service.create_alert(EnumAlertType.WARNING, "Disk", "Disk filling up")
        wall_clock.advance(minutes=5)

        assert service.resolve_alert(str(alert.id)) is True

        resolved = service.get_recent_alerts()[0]
        assert resolved.id == alert.id
        assert resolved.resolved is True
        assert resolved.resolved_at == wall_clock()

    def test_resolve_alert_is_idempotent(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        alert = service.create_alert(EnumAlertType.INFO, "Deploy", "Deploy finished")

        assert service.resolve_alert(alert.id) is True
        assert service.resolve_alert(alert.id) is False

    @pytest.mark.parametrize("alert_id", [uuid4(), "not-a-uuid"])
    def test_resolve_unknown_alert(
        self, make_service: Callable[..., MonitoringService], alert_id: object
    ) -> None:
        service = make_service()
        assert service.resolve_alert(alert_id) is False  # type: ignore[arg-type]

    def test_alert_message_is_sanitized(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()

        alert = service.create_alert(
            EnumAlertType.ERROR,
            "Connect failed",
            "cannot reach postgresql://app:pw@db:5432/app",
        )

        assert "pw@" not in alert.message
        assert "REDACTED" in alert.message

    def test_history_filters_unresolved_newest_first(
        self,
        make_service: Callable[..., MonitoringService],
        wall_clock: SettableNow,
    ) -> None:
        service = make_service()
        older = service.create_alert(EnumAlertType.INFO, "First", "one")
        wall_clock.advance(seconds=1)
        newer = service.create_alert(EnumAlertType.INFO, "Second", "two")
        service.resolve_alert(older.id)

        assert [a.id for a in service.get_alert_history()] == [newer.id, older.id]
        assert [a.id for a in service.get_alert_history(unresolved_only=True)] == [
            newer.id
        ]
        assert len(service.get_recent_alerts(limit=1)) == 1


class TestRecordError:
    """Tests for error recording."""

    @pytest.mark.parametrize(
        ("error_type", "alert_type", "title"),
        [
            (EnumSystemErrorType.DATABASE, EnumAlertType.CRITICAL, "Database Error"),
            (
                EnumSystemErrorType.AUTHENTICATION,
                EnumAlertType.CRITICAL,
                "Authentication Error",
            ),
            ("ai_service", EnumAlertType.ERROR, "Ai Service Error"),
            ("integration", EnumAlertType.ERROR, "Integration Error"),
            (EnumSystemErrorType.APPLICATION, EnumAlertType.ERROR, "Application Error"),
        ],
    )
    def test_severity_by_type(
        self,
        make_service: Callable[..., MonitoringService],
        error_type: EnumSystemErrorType | str,
        alert_type: EnumAlertType,
        title: str,
    ) -> None:
        service = make_service()

        record = service.record_error(error_type, "something broke")

        assert record.type is EnumSystemErrorType(error_type)
        alert = service.get_recent_alerts()[0]
        assert alert.type is alert_type
        assert alert.title == title
        assert alert.message == "something broke"

    def test_exception_details_captured(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        try:
            raise ValueError("bad input")
        except ValueError as e:
            record = service.record_error(
                EnumSystemErrorType.APPLICATION,
                "Request failed",
                e,
                {"route": "/posts"},
                user_id="user-1",
                request_id="req-1",
            )

        assert record.metadata["original_error"] == "ValueError: bad input"
        assert record.metadata["route"] == "/posts"
        assert record.stack is not None
        assert "ValueError" in record.stack
        assert record.user_id == "user-1"
        assert record.request_id == "req-1"
        alert = service.get_recent_alerts()[0]
        assert alert.metadata["request_id"] == "req-1"

    def test_sensitive_error_redacted(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()

        record = service.record_error(
            EnumSystemErrorType.DATABASE,
            "Query failed",
            RuntimeError("password authentication failed for user app"),
        )

        assert record.metadata["original_error"] == (
            "RuntimeError: [REDACTED - potentially sensitive data]"
        )

    def test_unknown_error_type_rejected(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        with pytest.raises(ValueError):
            service.record_error("cosmic_rays", "bit flipped")


class TestAlertRules:
    """Tests for custom metric rules."""

    @pytest.mark.asyncio
    async def test_rule_fires_on_threshold(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        store = MetricsStore()
        service = make_service(metrics_store=store)
        service.register_alert_rule(
            ModelAlertRule(
                name="Queue backlog",
                metric_name="queue_depth",
                comparison=EnumAlertComparison.GT,
                threshold=10.0,
                alert_type=EnumAlertType.CRITICAL,
            )
        )
        store.record_metric("queue_depth", 40.0)
        store.record_metric("queue_depth", 60.0)

        await service.perform_health_check()

        alert = next(a for a in service.get_recent_alerts() if a.title == "Queue backlog")
        assert alert.type is EnumAlertType.CRITICAL
        assert alert.metadata["observed"] == pytest.approx(50.0)
        assert alert.metadata["threshold"] == 10.0

    @pytest.mark.asyncio
    async def test_rule_below_threshold_disabled_or_without_data(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        store = MetricsStore()
        service = make_service(metrics_store=store)
        store.record_metric("queue_depth", 5.0)
        store.record_metric("error_count", 100.0)
        service.register_alert_rule(
            ModelAlertRule(
                name="Queue backlog",
                metric_name="queue_depth",
                comparison=EnumAlertComparison.GT,
                threshold=10.0,
            )
        )
        service.register_alert_rule(
            ModelAlertRule(
                name="Errors",
                metric_name="error_count",
                comparison=EnumAlertComparison.GTE,
                threshold=1.0,
                enabled=False,
            )
        )
        service.register_alert_rule(
            ModelAlertRule(
                name="Silent",
                metric_name="never_recorded",
                comparison=EnumAlertComparison.LT,
                threshold=1.0,
            )
        )

        await service.perform_health_check()

        titles = _titles(service)
        assert "Queue backlog" not in titles
        assert "Errors" not in titles
        assert "Silent" not in titles

    def test_register_list_delete(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        rule = service.register_alert_rule(
            ModelAlertRule(
                name="Slow queries",
                metric_name="database_operation_duration",
                comparison=EnumAlertComparison.GT,
                threshold=250.0,
            )
        )

        assert service.list_alert_rules() == [rule]
        assert service.get_monitoring_stats().alert_rules == 1
        assert service.delete_alert_rule(rule.id) is True
        assert service.delete_alert_rule(rule.id) is False
        assert service.list_alert_rules() == []


class TestAlertDelivery:
    """Tests for remote channel fan-out."""

    @pytest.mark.asyncio
    async def test_alert_sent_to_every_channel(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        first, second = FakeChannel(), FakeChannel()
        service = make_service(channels=[first, second])

        alert = service.create_alert(EnumAlertType.WARNING, "Latency", "p95 high")
        await service.flush_deliveries()

        assert first.received == [alert]
        assert second.received == [alert]

    @pytest.mark.asyncio
    async def test_failing_channel_does_not_propagate(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        broken = FakeChannel(fail_with=ConnectionError("relay down"))
        healthy = FakeChannel()
        service = make_service(channels=[broken, healthy])

        alert = service.create_alert(EnumAlertType.ERROR, "Outage", "relay down")
        await service.flush_deliveries()

        assert broken.received == [alert]
        assert healthy.received == [alert]
        assert service.get_recent_alerts() == [alert]

    @pytest.mark.asyncio
    async def test_rate_limited_per_alert_type(
        self,
        make_service: Callable[..., MonitoringService],
        manual_clock: ManualClock,
    ) -> None:
        channel = FakeChannel()
        config = MonitoringConfig(
            environment="test",
            max_alerts_per_window=2,
            alert_rate_limit_window_seconds=60.0,
        )
        service = make_service(config=config, channels=[channel])

        for i in range(3):
            service.create_alert(EnumAlertType.WARNING, f"Warning {i}", "w")
            await service.flush_deliveries()
        service.create_alert(EnumAlertType.CRITICAL, "Critical", "c")
        await service.flush_deliveries()

        assert [a.title for a in channel.received] == [
            "Warning 0",
            "Warning 1",
            "Critical",
        ]

        manual_clock.advance(61)
        service.create_alert(EnumAlertType.WARNING, "Warning 3", "w")
        await service.flush_deliveries()

        assert channel.received[-1].title == "Warning 3"
        # Rate-limited alerts are still stored
        assert service.get_monitoring_stats().total_alerts == 5

    def test_no_event_loop_skips_remote_delivery(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        channel = FakeChannel()
        service = make_service(channels=[channel])

        alert = service.create_alert(EnumAlertType.INFO, "Offline", "no loop")

        assert channel.received == []
        assert service.get_recent_alerts() == [alert]

    def test_channels_built_from_config(self) -> None:
        config = MonitoringConfig(
            environment="test",
            webhook_url="https://hooks.example.com/alerts",
            email_endpoint="https://mail.example.com/send",
        )

        service = MonitoringService(config=config)

        assert sorted(c.channel for c in service.channels) == ["email", "webhook"]

    def test_no_channels_without_urls(self) -> None:
        service = MonitoringService(config=MonitoringConfig(environment="test"))
        assert service.channels == []


class TestRetention:
    """Tests for bounded histories."""

    def test_entry_cap(self, make_service: Callable[..., MonitoringService]) -> None:
        config = MonitoringConfig(environment="test", max_entries=3)
        service = make_service(config=config)

        for i in range(5):
            service.record_error(EnumSystemErrorType.APPLICATION, f"error {i}")

        errors = service.get_recent_errors(limit=10)
        assert [e.message for e in errors] == ["error 4", "error 3", "error 2"]
        assert service.get_monitoring_stats().total_alerts == 3

    def test_cleanup_removes_expired_records(
        self,
        make_service: Callable[..., MonitoringService],
        wall_clock: SettableNow,
    ) -> None:
        config = MonitoringConfig(environment="test", retention_seconds=3600.0)
        service = make_service(config=config)
        service.record_error(EnumSystemErrorType.APPLICATION, "old error")

        wall_clock.advance(hours=2)
        removed = service.cleanup()

        # One error and the alert it raised
        assert removed >= 2
        assert service.get_recent_errors() == []
        assert service.get_recent_alerts() == []

    def test_cleanup_keeps_recent_records(
        self,
        make_service: Callable[..., MonitoringService],
        wall_clock: SettableNow,
    ) -> None:
        config = MonitoringConfig(environment="test", retention_seconds=3600.0)
        service = make_service(config=config)
        service.record_error(EnumSystemErrorType.APPLICATION, "fresh error")

        wall_clock.advance(minutes=30)
        service.cleanup()

        assert len(service.get_recent_errors()) == 1


class TestHealthTrends:
    """Tests for health trend reporting."""

    def test_no_history_returns_none(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        assert make_service().get_health_trends() is None

    @pytest.mark.asyncio
    async def test_degrading_direction(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        memory = [0.1, 0.1, 0.9, 0.9]
        service = make_service(memory_sampler=lambda: memory.pop(0))

        for _ in range(4):
            await service.perform_health_check()

        trends = service.get_health_trends(hours=1)
        assert trends is not None
        assert trends.total_checks == 4
        assert trends.direction == "degrading"
        assert trends.availability_percent == pytest.approx(50.0)
        assert trends.degraded_percent == pytest.approx(50.0)
        assert trends.avg_error_rate == pytest.approx(0.3)

    @pytest.mark.asyncio
    async def test_improving_direction(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
    ) -> None:
        memory = [0.9, 0.9, 0.1, 0.1]
        service = make_service(memory_sampler=lambda: memory.pop(0))

        for _ in range(4):
            await service.perform_health_check()

        trends = service.get_health_trends()
        assert trends is not None
        assert trends.direction == "improving"

    @pytest.mark.asyncio
    async def test_window_excludes_old_records(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
        wall_clock: SettableNow,
    ) -> None:
        service = make_service()
        await service.perform_health_check()
        wall_clock.advance(hours=3)

        assert service.get_health_trends(hours=1) is None
        assert len(service.get_health_metrics(hours=24)) == 1


class TestReporting:
    """Tests for stats and dashboard data."""

    @pytest.mark.asyncio
    async def test_dashboard_data(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
        manual_clock: ManualClock,
    ) -> None:
        store = MetricsStore()
        service = make_service(metrics_store=store)
        store.record_api_response_time("/posts", "GET", 120.0, 200)
        manual_clock.advance(42)

        await service.perform_health_check()
        dashboard = service.get_dashboard_data()

        assert dashboard.health_status is EnumHealthStatus.HEALTHY
        assert dashboard.monitoring_stats.total_health_checks == 1
        assert dashboard.monitoring_stats.uptime_seconds == pytest.approx(42.0)
        assert dashboard.monitoring_stats.is_active is False
        assert dashboard.api_overview.total == 1
        assert dashboard.connection_status is None
        assert dashboard.recent_errors[0].type is EnumSystemErrorType.DATABASE

    def test_dashboard_endpoint_breakdown(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        store = MetricsStore()
        service = make_service(metrics_store=store)
        store.record_api_response_time("/api/posts", "GET", 150.0, 200)

        dashboard = service.get_dashboard_data(window_seconds=3600.0)

        entry = dashboard.api_overview.breakdown["/api/posts"]
        assert entry.count == 1
        assert entry.avg_duration_ms == 150.0
        assert entry.error_rate == 0.0
        assert dashboard.health_status is None

    def test_stats_before_any_check(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        stats = make_service().get_monitoring_stats()

        assert stats.current_status is None
        assert stats.total_health_checks == 0
        assert stats.unresolved_alerts == 0


class TestMonitoringLoop:
    """Tests for the background monitoring task."""

    @pytest.mark.asyncio
    async def test_start_runs_check_then_sleeps(
        self,
        fully_configured_env: None,
        make_service: Callable[..., MonitoringService],
        monitoring_config: MonitoringConfig,
    ) -> None:
        slept = asyncio.Event()
        delays: list[float] = []

        async def parked_sleep(delay: float) -> None:
            delays.append(delay)
            slept.set()
            await asyncio.Event().wait()

        service = make_service(sleep=parked_sleep)

        task = service.start()
        await asyncio.wait_for(slept.wait(), timeout=1.0)

        assert service.is_active
        assert service.start() is task
        assert len(service.get_health_metrics()) == 1
        assert delays == [monitoring_config.health_check_interval_seconds]

        await service.shutdown()

        assert not service.is_active
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_stop_without_start(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        await service.stop()
        assert not service.is_active

    @pytest.mark.asyncio
    async def test_loop_exception_handler_records_error(
        self, make_service: Callable[..., MonitoringService]
    ) -> None:
        service = make_service()
        loop = asyncio.get_running_loop()
        service.install_loop_exception_handler(loop)
        try:
            loop.call_exception_handler(
                {
                    "message": "Task exception was never retrieved",
                    "exception": RuntimeError("worker crashed"),
                }
            )
        finally:
            loop.set_exception_handler(None)

        record = service.get_recent_errors()[0]
        assert record.type is EnumSystemErrorType.APPLICATION
        assert record.message == "Task exception was never retrieved"
        assert record.metadata["original_error"] == "RuntimeError: worker crashed"
