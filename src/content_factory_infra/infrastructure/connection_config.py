# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Database connection configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from content_factory_infra.enums import EnumInfraTransportType
from content_factory_infra.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from content_factory_infra.utils import mask_dsn, parse_env_float, parse_env_int


@dataclass
class ConnectionConfig:
    """PostgreSQL pool, retry, circuit breaker and reconnect configuration.

    Times that are configured rather than measured are in seconds, except
    the retry delays which keep the millisecond units of their environment
    variables.
    """

    dsn: str

    # Pool configuration
    max_connections: int = 20
    min_connections: int = 1
    idle_timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    command_timeout_seconds: float = 60.0

    # Retry policy "database"
    retry_attempts: int = 3
    retry_delay_ms: float = 1000.0
    retry_max_delay_ms: float = 5000.0

    # Circuit breaker
    circuit_threshold: int = 5
    circuit_cooldown_seconds: float = 30.0

    # Reconnect and health monitoring
    max_reconnect_attempts: int = 5
    reconnect_delay_seconds: float = 5.0
    reconnect_max_delay_seconds: float = 60.0
    health_check_interval_seconds: float = 30.0

    # Query history bounds
    query_history_size: int = 1000
    query_history_retention_seconds: float = 3600.0

    service_name: str = "postgres"

    def __post_init__(self) -> None:
        if not self.dsn:
            raise ProtocolConfigurationError(
                "Database DSN must not be empty",
                context=self._error_context(),
            )
        if self.min_connections > self.max_connections:
            raise ProtocolConfigurationError(
                f"min_connections ({self.min_connections}) must not exceed "
                f"max_connections ({self.max_connections})",
                context=self._error_context(),
            )

    def _error_context(self) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.DATABASE,
            operation="load_config",
            target_name=self.service_name,
        )

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(dsn={mask_dsn(self.dsn)!r}, "
            f"min_connections={self.min_connections}, "
            f"max_connections={self.max_connections}, "
            f"circuit_threshold={self.circuit_threshold}, "
            f"max_reconnect_attempts={self.max_reconnect_attempts})"
        )

    @classmethod
    def from_environment(cls) -> ConnectionConfig:
        """Create configuration from environment variables.

        Raises:
            ProtocolConfigurationError: ``DATABASE_URL`` is missing or a
                numeric variable is malformed or out of range.
        """
        dsn = os.getenv("DATABASE_URL", "")
        if not dsn:
            raise ProtocolConfigurationError(
                "DATABASE_URL environment variable is required",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.DATABASE,
                    operation="load_config",
                    target_name="postgres",
                ),
                variable="DATABASE_URL",
            )

        db = EnumInfraTransportType.DATABASE
        return cls(
            dsn=dsn,
            max_connections=parse_env_int(
                "DB_MAX_CONNECTIONS", 20, min_value=1, transport_type=db
            ),
            min_connections=parse_env_int(
                "DB_MIN_CONNECTIONS", 1, min_value=0, transport_type=db
            ),
            idle_timeout_seconds=parse_env_float(
                "DB_IDLE_TIMEOUT", 30.0, min_value=0, transport_type=db
            ),
            connect_timeout_seconds=parse_env_float(
                "DB_CONNECT_TIMEOUT", 10.0, min_value=0, transport_type=db
            ),
            command_timeout_seconds=parse_env_float(
                "DB_COMMAND_TIMEOUT", 60.0, min_value=0, transport_type=db
            ),
            retry_attempts=parse_env_int(
                "DB_RETRY_ATTEMPTS", 3, min_value=1, transport_type=db
            ),
            retry_delay_ms=parse_env_float(
                "DB_RETRY_DELAY", 1000.0, min_value=0, transport_type=db
            ),
            retry_max_delay_ms=parse_env_float(
                "DB_RETRY_MAX_DELAY", 5000.0, min_value=0, transport_type=db
            ),
            circuit_threshold=parse_env_int(
                "DB_CIRCUIT_THRESHOLD", 5, min_value=1, transport_type=db
            ),
            circuit_cooldown_seconds=parse_env_float(
                "DB_CIRCUIT_COOLDOWN", 30.0, min_value=0, transport_type=db
            ),
            max_reconnect_attempts=parse_env_int(
                "DB_MAX_RECONNECT_ATTEMPTS", 5, min_value=1, transport_type=db
            ),
            reconnect_delay_seconds=parse_env_float(
                "DB_RECONNECT_DELAY", 5.0, min_value=0, transport_type=db
            ),
            reconnect_max_delay_seconds=parse_env_float(
                "DB_RECONNECT_MAX_DELAY", 60.0, min_value=0, transport_type=db
            ),
            health_check_interval_seconds=parse_env_float(
                "DB_HEALTH_CHECK_INTERVAL", 30.0, min_value=0.01, transport_type=db
            ),
        )


__all__: list[str] = ["ConnectionConfig"]
