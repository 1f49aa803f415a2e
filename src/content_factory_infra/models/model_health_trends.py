# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Availability trend over recent health checks."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelHealthTrends"]


class ModelHealthTrends(BaseModel):
    """Percentages of checks per status and the direction of the error rate.

    ``direction`` compares the mean error rate of the newer half of the
    window with the older half: ``improving``, ``degrading`` or ``stable``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hours: float = Field(gt=0)
    total_checks: int = Field(ge=0)
    availability_percent: float = Field(ge=0, le=100)
    degraded_percent: float = Field(ge=0, le=100)
    unhealthy_percent: float = Field(ge=0, le=100)
    avg_response_time_ms: float = Field(ge=0)
    avg_error_rate: float = Field(ge=0, le=1)
    direction: str
