# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Single check in the aggregated health response."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumHealthStatus

__all__: list[str] = ["ModelServiceCheck"]


class ModelServiceCheck(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    service: str
    status: EnumHealthStatus
    response_time_ms: float = Field(default=0.0, ge=0)
    error: Optional[str] = None
    details: dict[str, object] = Field(default_factory=dict)
