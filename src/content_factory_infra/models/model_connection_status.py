# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status report of the database connection manager."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.models.model_circuit_breaker_snapshot import (
    ModelCircuitBreakerSnapshot,
)
from content_factory_infra.models.model_connection_metrics import (
    ModelConnectionMetrics,
)

__all__: list[str] = ["ModelConnectionStatus"]


class ModelConnectionStatus(BaseModel):
    """Result of ``DatabaseConnectionManager.get_status``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_initialized: bool
    is_healthy: bool
    is_unavailable: bool = Field(
        description="True once reconnect attempts are exhausted"
    )
    response_time_ms: float = Field(ge=0)
    error_count: int = Field(ge=0)
    consecutive_failures: int = Field(ge=0)
    metrics: ModelConnectionMetrics
    circuit_breaker: ModelCircuitBreakerSnapshot
    active_transactions: int = Field(ge=0)
    pool_size: Optional[int] = None
    pool_idle: Optional[int] = None
    last_health_check: datetime
    next_health_check: Optional[datetime] = None
