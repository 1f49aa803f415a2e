# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Recorded application error (audit trail entry)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumSystemErrorType

__all__: list[str] = ["ModelSystemError"]


class ModelSystemError(BaseModel):
    """Append-only error record kept by the monitoring service."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    type: EnumSystemErrorType
    message: str
    stack: Optional[str] = None
    timestamp: datetime
    user_id: Optional[str] = None
    request_id: Optional[str] = None
    metadata: dict[str, object] = Field(default_factory=dict)
