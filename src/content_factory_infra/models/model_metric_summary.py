# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Derived summary of a metric series window."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelMetricSummary"]


class ModelMetricSummary(BaseModel):
    """Count/avg/min/max/p95 over the in-window points of one series.

    An empty window yields the zero summary (``ModelMetricSummary()``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    count: int = Field(default=0, ge=0)
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    p95: float = 0.0
    unit: Optional[str] = None
