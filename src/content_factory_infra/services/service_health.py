# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HTTP Health Service.

Minimal aiohttp server exposing the aggregated health check for load
balancers and container orchestration, plus Prometheus metrics.

The service exposes:
    - GET /health: Aggregated health status as JSON
    - GET /ready: Readiness status as JSON (alias for /health)
    - GET /metrics: Prometheus text exposition (when an exporter is given)

HTTP status is 200 for healthy and degraded, 503 for unhealthy. Degraded
instances stay in rotation; callers that want otherwise inspect the
``status`` field of the body.

Configuration:
    HEALTH_HTTP_PORT: Port to listen on (default: 8085)

Example:
    >>> async def main():
    ...     server = ServiceHealth(aggregator=HealthCheckAggregator(manager))
    ...     await server.start()
    ...     # curl http://localhost:8085/health
    ...     await server.stop()
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from aiohttp import web

from content_factory_infra.enums import EnumHealthStatus, EnumInfraTransportType
from content_factory_infra.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from content_factory_infra.utils import parse_env_int, sanitize_error_message

if TYPE_CHECKING:
    from content_factory_infra.observability.prometheus_metrics import (
        PrometheusExporter,
    )
    from content_factory_infra.services.service_health_aggregator import (
        HealthCheckAggregator,
    )

logger = logging.getLogger(__name__)

DEFAULT_HTTP_PORT: int = 8085
DEFAULT_HTTP_HOST = "0.0.0.0"  # noqa: S104 - Required for container networking


def _get_port_from_env(default: int) -> int:
    """Parse HEALTH_HTTP_PORT, falling back to ``default`` when invalid."""
    try:
        return parse_env_int(
            "HEALTH_HTTP_PORT",
            default,
            min_value=1,
            max_value=65535,
            transport_type=EnumInfraTransportType.HTTP,
            service_name="health_server",
        )
    except ProtocolConfigurationError as e:
        logger.warning(
            "Invalid HEALTH_HTTP_PORT environment variable, using default %d: %s",
            default,
            e,
        )
        return default


class ServiceHealth:
    """HTTP server for health and metrics endpoints.

    Args:
        aggregator: Produces the ``/health`` response.
        exporter: Optional Prometheus exporter backing ``/metrics``.
        port: Port to listen on. Defaults to ``HEALTH_HTTP_PORT`` or 8085.
        host: Host to bind to.
    """

    def __init__(
        self,
        aggregator: HealthCheckAggregator,
        exporter: Optional[PrometheusExporter] = None,
        port: Optional[int] = None,
        host: str = DEFAULT_HTTP_HOST,
    ) -> None:
        self._aggregator = aggregator
        self._exporter = exporter
        self._port = port if port is not None else _get_port_from_env(DEFAULT_HTTP_PORT)
        self._host = host
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def is_running(self) -> bool:
        return self._site is not None

    @property
    def port(self) -> int:
        return self._port

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes registered."""
        app = web.Application()
        app.add_routes(
            [
                web.get("/health", self._handle_health),
                web.get("/ready", self._handle_health),
            ]
        )
        if self._exporter is not None:
            app.add_routes([web.get("/metrics", self._handle_metrics)])
        return app

    async def start(self) -> None:
        """Bind and start serving. Calling it on a running server does nothing.

        Raises:
            RuntimeHostError: The port could not be bound.
        """
        if self.is_running:
            return

        address = f"{self._host}:{self._port}"
        runner = web.AppRunner(self.create_app())
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            context = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.HTTP,
                operation="start_health_server",
                target_name=address,
                correlation_id=uuid4(),
            )
            logger.exception(
                f"Health server could not bind {address}",
                extra={"errno": e.errno, "correlation_id": str(context.correlation_id)},
            )
            raise RuntimeHostError(
                f"Failed to start health server on {address}: {e}", context=context
            ) from e

        self._runner, self._site = runner, site
        logger.info(
            f"Health server listening on {address}",
            extra={"metrics_enabled": self._exporter is not None},
        )

    async def stop(self) -> None:
        """Stop serving. Calling it on a stopped server does nothing."""
        site, self._site = self._site, None
        runner, self._runner = self._runner, None
        if site is None and runner is None:
            return
        if site is not None:
            try:
                await site.stop()
            except Exception as e:
                logger.warning(f"Error stopping health site: {sanitize_error_message(e)}")
        if runner is not None:
            try:
                await runner.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up health runner: {sanitize_error_message(e)}")
        logger.info("Health server stopped")

    @staticmethod
    def _failure_response(message: str, error: Exception) -> web.Response:
        correlation_id = uuid4()
        logger.exception(
            message,
            extra={
                "correlation_id": str(correlation_id),
                "error_type": type(error).__name__,
            },
        )
        body = {
            "status": EnumHealthStatus.UNHEALTHY.value,
            "timestamp": datetime.now(UTC).isoformat(),
            "error": sanitize_error_message(error),
            "correlation_id": str(correlation_id),
        }
        return web.json_response(body, status=503)

    async def _handle_health(self, request: web.Request) -> web.Response:
        try:
            response, http_status = await self._aggregator.run()
        except Exception as e:
            return self._failure_response("Health check raised", e)
        return web.Response(
            text=response.model_dump_json(),
            status=http_status,
            content_type="application/json",
        )

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        assert self._exporter is not None
        try:
            payload = self._exporter.render()
        except Exception as e:
            return self._failure_response("Metrics rendering raised", e)
        # aiohttp rejects parameters in content_type, so set the header directly
        return web.Response(
            body=payload, headers={"Content-Type": self._exporter.content_type}
        )


__all__: list[str] = ["DEFAULT_HTTP_HOST", "DEFAULT_HTTP_PORT", "ServiceHealth"]
