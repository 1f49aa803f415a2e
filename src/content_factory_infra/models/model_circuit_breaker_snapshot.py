# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Read-only projection of a circuit breaker's state."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumCircuitBreakerState

__all__: list[str] = ["ModelCircuitBreakerSnapshot"]


class ModelCircuitBreakerSnapshot(BaseModel):
    """Point-in-time view of ``AsyncCircuitBreaker`` state.

    ``last_failure_time`` is a value of the breaker's monotonic clock, not a
    wall-clock timestamp; use ``retry_after_seconds`` for display.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_name: str = Field(description="Resource protected by the breaker")
    state: EnumCircuitBreakerState = Field(description="Current breaker state")
    is_open: bool = Field(description="True unless the breaker is CLOSED")
    failure_count: int = Field(ge=0, description="Failures since the last success")
    last_failure_time: Optional[float] = Field(
        default=None, description="Monotonic time of the last counted failure"
    )
    threshold: int = Field(ge=1, description="Failures required to open")
    cooldown_seconds: float = Field(ge=0, description="Seconds before a probe")
    retry_after_seconds: float = Field(
        ge=0, description="Seconds until a probe is admitted (0 when CLOSED)"
    )
