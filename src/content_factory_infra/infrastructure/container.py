# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Infrastructure Service Container

Constructs one instance of every infrastructure service with explicit
dependencies and owns their lifecycle:

    MetricsStore
      -> DatabaseConnectionManager (records query metrics into the store)
      -> MonitoringService (probes the manager, reads the store)
      -> HealthCheckAggregator, PrometheusExporter
      -> ServiceHealth (HTTP /health, /ready, /metrics)

Services are also registered by name so callers can resolve them with
``get_service("DatabaseConnectionManager")``. No module-level singletons:
every call to ``create_infrastructure_container()`` yields an independent
graph.
"""

from __future__ import annotations

import logging
from typing import Optional

from content_factory_infra.errors import ProtocolConfigurationError
from content_factory_infra.infrastructure.connection_config import ConnectionConfig
from content_factory_infra.infrastructure.database_connection_manager import (
    DatabaseConnectionManager,
)
from content_factory_infra.observability.metrics_store import MetricsStore
from content_factory_infra.observability.monitoring_config import MonitoringConfig
from content_factory_infra.observability.monitoring_service import MonitoringService
from content_factory_infra.observability.prometheus_metrics import PrometheusExporter
from content_factory_infra.services.service_health import ServiceHealth
from content_factory_infra.services.service_health_aggregator import (
    HealthCheckAggregator,
)

logger = logging.getLogger(__name__)


class InfraContainer:
    """Holds the wired infrastructure services and starts/stops them."""

    def __init__(
        self,
        monitoring_config: MonitoringConfig,
        connection_config: Optional[ConnectionConfig] = None,
        health_port: Optional[int] = None,
        connection_manager: Optional[DatabaseConnectionManager] = None,
    ) -> None:
        self._services: dict[str, object] = {}

        self.metrics_store = MetricsStore(
            retention_seconds=monitoring_config.retention_seconds,
            max_entries_per_series=monitoring_config.max_entries,
        )
        if connection_manager is None and connection_config is not None:
            connection_manager = DatabaseConnectionManager(
                connection_config, metrics_store=self.metrics_store
            )
        self.connection_manager = connection_manager
        self.monitoring = MonitoringService(
            config=monitoring_config,
            metrics_store=self.metrics_store,
            connection_manager=connection_manager,
        )
        self.aggregator = HealthCheckAggregator(
            connection_manager=connection_manager,
            version=monitoring_config.app_version,
            environment=monitoring_config.environment,
        )
        self.exporter = PrometheusExporter(self.monitoring)
        self.health_server = ServiceHealth(
            aggregator=self.aggregator, exporter=self.exporter, port=health_port
        )
        self._started = False

        self.register_service("MetricsStore", self.metrics_store)
        if connection_manager is not None:
            self.register_service("DatabaseConnectionManager", connection_manager)
        self.register_service("MonitoringService", self.monitoring)
        self.register_service("HealthCheckAggregator", self.aggregator)
        self.register_service("PrometheusExporter", self.exporter)
        self.register_service("ServiceHealth", self.health_server)

    def register_service(self, service_name: str, service_instance: object) -> None:
        self._services[service_name] = service_instance

    def get_service(self, service_name: str) -> Optional[object]:
        return self._services.get(service_name)

    @property
    def service_names(self) -> list[str]:
        return list(self._services)

    async def start(self, serve_http: bool = True) -> None:
        """Initialize the pool and start background loops, then the server.

        A pool that fails to initialize is logged and left to lazy
        initialization; monitoring reports the database as unhealthy.
        """
        if self._started:
            return
        if self.connection_manager is not None:
            try:
                await self.connection_manager.initialize()
            except Exception:
                logger.exception("Database initialization failed at startup")
            self.connection_manager.start_health_monitoring()
        self.monitoring.install_loop_exception_handler()
        self.monitoring.start()
        if serve_http:
            await self.health_server.start()
        self._started = True
        logger.info(
            "Infrastructure container started",
            extra={"services": self.service_names},
        )

    async def shutdown(self) -> None:
        """Stop everything in reverse start order. Idempotent."""
        if not self._started:
            return
        await self.health_server.stop()
        await self.monitoring.shutdown()
        if self.connection_manager is not None:
            await self.connection_manager.shutdown()
        self._started = False
        logger.info("Infrastructure container stopped")


def create_infrastructure_container(
    monitoring_config: Optional[MonitoringConfig] = None,
    connection_config: Optional[ConnectionConfig] = None,
    health_port: Optional[int] = None,
) -> InfraContainer:
    """
    Create the infrastructure container from explicit or environment config.

    A missing ``DATABASE_URL`` is logged and yields a container without a
    connection manager; malformed database settings still raise.

    Returns:
        InfraContainer with all services constructed but not started
    """
    monitoring_config = monitoring_config or MonitoringConfig.from_environment()
    if connection_config is None:
        try:
            connection_config = ConnectionConfig.from_environment()
        except ProtocolConfigurationError as e:
            if e.context.get("variable") != "DATABASE_URL":
                raise
            logger.warning("DATABASE_URL not set, database services disabled")

    container = InfraContainer(
        monitoring_config=monitoring_config,
        connection_config=connection_config,
        health_port=health_port,
    )
    logger.info(
        f"Created infrastructure container with {len(container.service_names)} services"
    )
    return container


__all__: list[str] = ["InfraContainer", "create_infrastructure_container"]
