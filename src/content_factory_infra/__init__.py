# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Content Factory Infrastructure Layer - Resilient data access and monitoring.

This package provides the infrastructure core of the Content Factory
services:

- Database access: pooled asyncpg connections behind a circuit breaker
  and classified retry policies, with background reconnect
- Metrics: bounded in-memory time series with percentile summaries
- Monitoring: periodic health checks, threshold and rule based alerts,
  error tracking and alert delivery to webhook and email channels
- Health: aggregated ``/health`` endpoint and Prometheus ``/metrics``

Key Components:
    - DatabaseConnectionManager: Single entry point for database operations
    - MonitoringService: Health, alert and error state for one process
    - HealthCheckAggregator: Dependency checks behind ``GET /health``
    - InfraContainer: Explicit construction and lifecycle of the services
"""

__all__: list[str] = []
