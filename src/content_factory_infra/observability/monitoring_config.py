# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Monitoring service configuration.

Values come from the environment (``MonitoringConfig.from_environment``)
and may be overlaid from a YAML file whose top-level keys are the field
names of ``MonitoringConfig``::

    health_check_interval_seconds: 30
    error_rate_threshold: 0.1
    webhook_url: https://hooks.example.com/alerts
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from content_factory_infra.enums import EnumInfraTransportType
from content_factory_infra.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from content_factory_infra.utils import (
    detect_environment,
    mask_url,
    parse_env_float,
    parse_env_int,
)

_SECONDS_PER_DAY = 24 * 3600.0


@dataclass
class MonitoringConfig:
    """Health check cadence, retention, alert thresholds and channels."""

    health_check_interval_seconds: float = 60.0
    cleanup_interval_seconds: float = 3600.0
    retention_seconds: float = 7 * _SECONDS_PER_DAY
    max_entries: int = 5000

    # Alert thresholds
    error_rate_threshold: float = 0.05
    response_time_threshold_ms: float = 5000.0
    memory_usage_threshold: float = 0.85
    cpu_usage_threshold: float = 0.8

    # Remote channels, enabled only when configured
    webhook_url: Optional[str] = None
    email_endpoint: Optional[str] = None
    channel_timeout_seconds: float = 10.0

    # Outbound delivery rate limit, per alert type
    alert_rate_limit_window_seconds: float = 60.0
    max_alerts_per_window: int = 10

    service_name: str = "content-factory"
    environment: str = field(default_factory=detect_environment)
    app_version: str = "1.0.0"

    def __post_init__(self) -> None:
        if self.health_check_interval_seconds <= 0:
            raise ProtocolConfigurationError(
                "health_check_interval_seconds must be positive",
                context=_config_context(),
            )
        if self.retention_seconds <= 0:
            raise ProtocolConfigurationError(
                "retention_seconds must be positive",
                context=_config_context(),
            )
        if self.max_entries < 1:
            raise ProtocolConfigurationError(
                f"max_entries must be >= 1, got {self.max_entries}",
                context=_config_context(),
            )

    def __repr__(self) -> str:
        webhook = mask_url(self.webhook_url) if self.webhook_url else None
        email = mask_url(self.email_endpoint) if self.email_endpoint else None
        return (
            f"MonitoringConfig(environment={self.environment!r}, "
            f"health_check_interval_seconds={self.health_check_interval_seconds}, "
            f"retention_seconds={self.retention_seconds}, "
            f"webhook_url={webhook!r}, email_endpoint={email!r})"
        )

    @property
    def retention_days(self) -> float:
        return self.retention_seconds / _SECONDS_PER_DAY

    @classmethod
    def from_environment(cls) -> MonitoringConfig:
        """Create configuration from ``MONITORING_*`` environment variables."""
        retention_days = parse_env_float(
            "MONITORING_RETENTION_DAYS", 7.0, min_value=0.01, service_name="monitoring"
        )
        return cls(
            health_check_interval_seconds=parse_env_float(
                "MONITORING_HEALTH_CHECK_INTERVAL",
                60.0,
                min_value=0.01,
                service_name="monitoring",
            ),
            cleanup_interval_seconds=parse_env_float(
                "MONITORING_CLEANUP_INTERVAL",
                3600.0,
                min_value=1,
                service_name="monitoring",
            ),
            retention_seconds=retention_days * _SECONDS_PER_DAY,
            max_entries=parse_env_int(
                "MONITORING_MAX_ENTRIES", 5000, min_value=1, service_name="monitoring"
            ),
            error_rate_threshold=parse_env_float(
                "MONITORING_ERROR_RATE_THRESHOLD",
                0.05,
                min_value=0,
                max_value=1,
                service_name="monitoring",
            ),
            response_time_threshold_ms=parse_env_float(
                "MONITORING_RESPONSE_TIME_THRESHOLD",
                5000.0,
                min_value=0,
                service_name="monitoring",
            ),
            memory_usage_threshold=parse_env_float(
                "MONITORING_MEMORY_THRESHOLD",
                0.85,
                min_value=0,
                max_value=1,
                service_name="monitoring",
            ),
            cpu_usage_threshold=parse_env_float(
                "MONITORING_CPU_THRESHOLD",
                0.8,
                min_value=0,
                max_value=1,
                service_name="monitoring",
            ),
            webhook_url=os.getenv("MONITORING_WEBHOOK_URL") or None,
            email_endpoint=os.getenv("MONITORING_EMAIL_ENDPOINT") or None,
            alert_rate_limit_window_seconds=parse_env_float(
                "MONITORING_ALERT_RATE_WINDOW",
                60.0,
                min_value=0,
                service_name="monitoring",
            ),
            max_alerts_per_window=parse_env_int(
                "MONITORING_MAX_ALERTS_PER_WINDOW",
                10,
                min_value=1,
                service_name="monitoring",
            ),
            service_name=os.getenv("MONITORING_SERVICE_NAME", "content-factory"),
            environment=detect_environment(),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
        )

    @classmethod
    def from_yaml(
        cls, path: str | Path, base: Optional[MonitoringConfig] = None
    ) -> MonitoringConfig:
        """Overlay the values of a YAML file onto ``base``.

        Args:
            path: YAML file containing a mapping of field names to values.
            base: Configuration to overlay. Defaults to
                ``MonitoringConfig.from_environment()``.

        Raises:
            ProtocolConfigurationError: The file cannot be read or parsed,
                is not a mapping, or contains unknown keys.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ProtocolConfigurationError(
                f"Failed to load monitoring config from {path}: {type(e).__name__}",
                context=_config_context(),
                path=str(path),
            ) from e

        if base is None:
            base = cls.from_environment()
        if data is None:
            return base
        if not isinstance(data, dict):
            raise ProtocolConfigurationError(
                f"Monitoring config file {path} must contain a mapping",
                context=_config_context(),
                path=str(path),
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ProtocolConfigurationError(
                f"Unknown monitoring config keys: {', '.join(unknown)}",
                context=_config_context(),
                path=str(path),
                unknown_keys=unknown,
            )
        return replace(base, **data)


def _config_context() -> ModelInfraErrorContext:
    return ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.RUNTIME,
        operation="load_config",
        target_name="monitoring",
    )


__all__: list[str] = ["MonitoringConfig"]
