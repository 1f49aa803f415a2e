# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Aggregated health check behind ``GET /health``.

Five checks run concurrently:

    ==============  ==========================================  ==========
    service         fails when                                  status
    ==============  ==========================================  ==========
    database        ``test_connection()`` is False              unhealthy
    ai-services     ``GEMINI_API_KEY`` missing                  degraded
    authentication  Stack Auth variables missing                unhealthy
    integrations    encryption secret missing or < 32 chars     degraded
    environment     required variables missing                  unhealthy
    ==============  ==========================================  ==========

A check that raises is reported ``unhealthy`` with a sanitized error. The
overall status is ``unhealthy`` if any check is unhealthy, else
``degraded`` if any is degraded, else ``healthy``; HTTP 503 is returned
only for ``unhealthy``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from content_factory_infra.enums import EnumHealthStatus
from content_factory_infra.models import (
    ModelHealthCheckResponse,
    ModelHealthCheckSummary,
    ModelServiceCheck,
)
from content_factory_infra.observability.monitoring_service import (
    AUTH_ENV_VARS,
    MIN_ENCRYPTION_SECRET_LENGTH,
)
from content_factory_infra.utils import detect_environment, sanitize_error_message

if TYPE_CHECKING:
    from content_factory_infra.infrastructure.database_connection_manager import (
        DatabaseConnectionManager,
    )

logger = logging.getLogger(__name__)

SOCIAL_PLATFORM_ENV_VARS: tuple[str, ...] = (
    "TWITTER_API_KEY",
    "LINKEDIN_CLIENT_ID",
    "FACEBOOK_APP_ID",
    "REDDIT_CLIENT_ID",
    "PINTEREST_APP_ID",
)

REQUIRED_ENV_VARS: tuple[str, ...] = (
    *AUTH_ENV_VARS,
    "DATABASE_URL",
    "GEMINI_API_KEY",
    "INTEGRATION_ENCRYPTION_SECRET",
)

CheckResult = tuple[EnumHealthStatus, Optional[str], dict[str, object]]


def overall_status(checks: list[ModelServiceCheck]) -> EnumHealthStatus:
    statuses = {check.status for check in checks}
    if EnumHealthStatus.UNHEALTHY in statuses:
        return EnumHealthStatus.UNHEALTHY
    if EnumHealthStatus.DEGRADED in statuses:
        return EnumHealthStatus.DEGRADED
    return EnumHealthStatus.HEALTHY


class HealthCheckAggregator:
    """Runs the service checks and builds ``ModelHealthCheckResponse``."""

    def __init__(
        self,
        connection_manager: Optional[DatabaseConnectionManager] = None,
        version: Optional[str] = None,
        environment: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.connection_manager = connection_manager
        self.version = version or os.getenv("APP_VERSION", "1.0.0")
        self.environment = environment or detect_environment()
        self._clock = clock
        self._started_at = clock()

    async def run(self) -> tuple[ModelHealthCheckResponse, int]:
        """Evaluate every check; return the response and its HTTP status."""
        checks = list(
            await asyncio.gather(
                self._timed("database", self._check_database),
                self._timed("ai-services", self._check_ai_services),
                self._timed("authentication", self._check_authentication),
                self._timed("integrations", self._check_integrations),
                self._timed("environment", self._check_environment),
            )
        )
        status = overall_status(checks)
        response = ModelHealthCheckResponse(
            status=status,
            timestamp=datetime.now(UTC),
            version=self.version,
            uptime_seconds=max(0.0, self._clock() - self._started_at),
            environment=self.environment,
            checks=checks,
            summary=ModelHealthCheckSummary(
                total=len(checks),
                healthy=sum(1 for c in checks if c.status is EnumHealthStatus.HEALTHY),
                unhealthy=sum(
                    1 for c in checks if c.status is EnumHealthStatus.UNHEALTHY
                ),
                degraded=sum(1 for c in checks if c.status is EnumHealthStatus.DEGRADED),
            ),
        )
        if status is not EnumHealthStatus.HEALTHY:
            logger.warning(
                f"Aggregated health check {status.value}",
                extra={
                    "failing": [
                        c.service for c in checks if c.status is not EnumHealthStatus.HEALTHY
                    ]
                },
            )
        return response, response.http_status

    async def _timed(
        self, service: str, check: Callable[[], Awaitable[CheckResult]]
    ) -> ModelServiceCheck:
        start = self._clock()
        try:
            status, error, details = await check()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"Health check {service} raised: {sanitize_error_message(e)}",
                extra={"service": service},
            )
            status, error, details = (
                EnumHealthStatus.UNHEALTHY,
                sanitize_error_message(e),
                {},
            )
        return ModelServiceCheck(
            service=service,
            status=status,
            response_time_ms=max(0.0, (self._clock() - start) * 1000),
            error=error,
            details=details,
        )

    async def _check_database(self) -> CheckResult:
        manager = self.connection_manager
        if manager is None:
            return (
                EnumHealthStatus.UNHEALTHY,
                "Database connection manager not configured",
                {},
            )
        if not manager.is_initialized:
            await manager.initialize()
        connected = await manager.test_connection()
        status = manager.get_status()
        details: dict[str, object] = {
            "provider": "postgresql",
            "circuit_state": status.circuit_breaker.state.value,
            "pool_size": status.pool_size,
            "pool_idle": status.pool_idle,
            "reconnect_attempts": status.metrics.reconnect_attempts,
        }
        if not connected:
            return EnumHealthStatus.UNHEALTHY, "Database connection failed", details
        return EnumHealthStatus.HEALTHY, None, details

    async def _check_ai_services(self) -> CheckResult:
        # Configuration only; no billable API call
        if not os.getenv("GEMINI_API_KEY"):
            return EnumHealthStatus.DEGRADED, "Gemini API key not configured", {}
        return (
            EnumHealthStatus.HEALTHY,
            None,
            {"provider": "google-gemini", "configured": True},
        )

    async def _check_authentication(self) -> CheckResult:
        missing = [name for name in AUTH_ENV_VARS if not os.getenv(name)]
        if missing:
            return (
                EnumHealthStatus.UNHEALTHY,
                f"Missing environment variables: {', '.join(missing)}",
                {},
            )
        return (
            EnumHealthStatus.HEALTHY,
            None,
            {"provider": "stack-auth", "configured": True},
        )

    async def _check_integrations(self) -> CheckResult:
        secret = os.getenv("INTEGRATION_ENCRYPTION_SECRET")
        if not secret:
            return (
                EnumHealthStatus.DEGRADED,
                "Integration encryption secret not configured",
                {},
            )
        if len(secret) < MIN_ENCRYPTION_SECRET_LENGTH:
            return (
                EnumHealthStatus.DEGRADED,
                "Integration encryption secret is too short",
                {},
            )
        configured = [key for key in SOCIAL_PLATFORM_ENV_VARS if os.getenv(key)]
        return (
            EnumHealthStatus.HEALTHY,
            None,
            {
                "encryption_configured": True,
                "social_media_integrations": len(configured),
                "available_integrations": len(SOCIAL_PLATFORM_ENV_VARS),
            },
        )

    async def _check_environment(self) -> CheckResult:
        missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        details: dict[str, object] = {
            "configured": len(REQUIRED_ENV_VARS) - len(missing),
            "required": len(REQUIRED_ENV_VARS),
        }
        if missing:
            details["missing"] = missing
            return (
                EnumHealthStatus.UNHEALTHY,
                f"Missing required environment variables: {', '.join(missing)}",
                details,
            )
        details["environment"] = self.environment
        return EnumHealthStatus.HEALTHY, None, details


__all__: list[str] = [
    "HealthCheckAggregator",
    "REQUIRED_ENV_VARS",
    "SOCIAL_PLATFORM_ENV_VARS",
    "overall_status",
]
