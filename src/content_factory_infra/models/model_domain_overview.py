# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Windowed overview of one instrumented domain (API, database, AI, integration)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.models.model_domain_breakdown import ModelDomainBreakdown

__all__: list[str] = ["ModelDomainOverview"]


class ModelDomainOverview(BaseModel):
    """Overall figures plus a breakdown by the domain's natural dimension.

    ``dimension`` names the breakdown key: ``endpoint`` for the API,
    ``operation`` for the database, ``service`` for AI calls and
    ``platform`` for integrations. An empty window reports a success rate
    of 100.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dimension: str
    total: int = Field(default=0, ge=0)
    avg_duration_ms: float = Field(default=0.0, ge=0)
    p95_duration_ms: float = Field(default=0.0, ge=0)
    success_rate: float = Field(default=100.0, ge=0, le=100)
    error_rate: float = Field(default=0.0, ge=0, le=100)
    breakdown: dict[str, ModelDomainBreakdown] = Field(default_factory=dict)
