# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Per-dimension row of a domain overview (one endpoint, operation, ...)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelDomainBreakdown"]


class ModelDomainBreakdown(BaseModel):
    """Aggregates for one key of a domain breakdown.

    Attributes:
        count: Calls recorded in the window.
        avg_duration_ms: Mean duration (response time for API endpoints).
        error_rate: Failed calls as a percentage of ``count``.
        methods: HTTP methods seen (API endpoints only).
        tokens_used: Tokens consumed (AI services only).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    count: int = Field(ge=0)
    avg_duration_ms: float = Field(ge=0)
    error_rate: float = Field(ge=0, le=100)
    methods: list[str] = Field(default_factory=list)
    tokens_used: int = Field(default=0, ge=0)
