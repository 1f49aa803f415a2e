# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Alert Model.

Alerts are immutable. Resolution produces a new instance via
``model_copy(update=...)`` which the monitoring service stores in place of
the old one; the validator below guarantees ``resolved_at`` is present
exactly when ``resolved`` is true.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from content_factory_infra.enums import EnumAlertType

__all__: list[str] = ["ModelAlert"]


class ModelAlert(BaseModel):
    """Alert raised by the monitoring service.

    Attributes:
        id: Unique alert id.
        type: Severity (info, warning, error, critical).
        title: Short title; threshold alerts are de-duplicated by title.
        message: Human-readable description (sanitized).
        timestamp: When the alert was raised.
        resolved: Whether an operator or rule resolved the alert.
        resolved_at: When it was resolved; set iff ``resolved``.
        metadata: Structured context (observed value, threshold, ...).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    type: EnumAlertType
    title: str = Field(min_length=1)
    message: str
    timestamp: datetime
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    metadata: dict[str, object] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_resolution(self) -> ModelAlert:
        if self.resolved != (self.resolved_at is not None):
            raise ValueError("resolved_at must be set if and only if resolved is true")
        return self

    def resolve(self, resolved_at: datetime) -> ModelAlert:
        """Return the resolved copy of this alert."""
        return self.model_copy(update={"resolved": True, "resolved_at": resolved_at})
