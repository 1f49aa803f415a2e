# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Check counts of the aggregated health response."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelHealthCheckSummary"]


class ModelHealthCheckSummary(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = Field(ge=0)
    healthy: int = Field(ge=0)
    unhealthy: int = Field(ge=0)
    degraded: int = Field(ge=0)
