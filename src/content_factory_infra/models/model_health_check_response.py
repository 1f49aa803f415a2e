# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Aggregated health-check payload served on ``/health``."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumHealthStatus
from content_factory_infra.models.model_health_check_summary import (
    ModelHealthCheckSummary,
)
from content_factory_infra.models.model_service_check import ModelServiceCheck

__all__: list[str] = ["ModelHealthCheckResponse"]


class ModelHealthCheckResponse(BaseModel):
    """Overall status plus per-check detail.

    Overall status is ``unhealthy`` if any check is unhealthy, else
    ``degraded`` if any check is degraded, else ``healthy``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: EnumHealthStatus
    timestamp: datetime
    version: str
    uptime_seconds: float = Field(ge=0)
    environment: str
    checks: list[ModelServiceCheck]
    summary: ModelHealthCheckSummary

    @property
    def http_status(self) -> int:
        return self.status.http_status
