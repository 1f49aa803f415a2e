# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Content Factory Infrastructure Services Module.

Provides the health check entry point: the aggregator that evaluates the
service checks and the HTTP server that exposes them.

Exports:
    HealthCheckAggregator: Runs the five service checks concurrently
    ServiceHealth: aiohttp server for /health, /ready and /metrics
"""

from content_factory_infra.services.service_health import ServiceHealth
from content_factory_infra.services.service_health_aggregator import (
    HealthCheckAggregator,
)

__all__ = [
    "HealthCheckAggregator",
    "ServiceHealth",
]
