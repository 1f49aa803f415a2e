# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Entry of the connection manager's bounded query history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumDbErrorKind

__all__: list[str] = ["ModelQueryRecord"]


class ModelQueryRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime
    operation: str
    duration_ms: float = Field(ge=0)
    success: bool
    attempts: int = Field(default=1, ge=0)
    kind: Optional[EnumDbErrorKind] = None
    correlation_id: UUID
