# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Lifetime counters of the database connection manager."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelConnectionMetrics"]


class ModelConnectionMetrics(BaseModel):
    """Lifetime query counters.

    ``average_response_time_ms`` is a lifetime running mean over all
    queries. Windowed latency summaries come from the metrics store.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_queries: int = Field(default=0, ge=0)
    successful_queries: int = Field(default=0, ge=0)
    failed_queries: int = Field(default=0, ge=0)
    retried_attempts: int = Field(default=0, ge=0)
    average_response_time_ms: float = Field(default=0.0, ge=0)
    reconnect_attempts: int = Field(default=0, ge=0)
    total_reconnects: int = Field(default=0, ge=0)
    success_rate: float = Field(default=100.0, description="Percent")
    error_rate: float = Field(default=0.0, description="Percent")
    uptime_hours: Optional[float] = None
    queries_per_second: Optional[float] = None
