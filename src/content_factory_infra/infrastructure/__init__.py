# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Database infrastructure and service wiring.

Exports:
    ConnectionConfig: Pool, retry, breaker and reconnect settings
    DatabaseConnectionManager: Resilient asyncpg pool owner
    InfraContainer: Constructs and owns the infrastructure services
    create_infrastructure_container: Builds a container from the environment
"""

from content_factory_infra.infrastructure.connection_config import ConnectionConfig
from content_factory_infra.infrastructure.database_connection_manager import (
    DatabaseConnectionManager,
)
from content_factory_infra.infrastructure.container import (
    InfraContainer,
    create_infrastructure_container,
)

__all__: list[str] = [
    "ConnectionConfig",
    "DatabaseConnectionManager",
    "InfraContainer",
    "create_infrastructure_container",
]
