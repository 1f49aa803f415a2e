# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Outcome of delivering an alert to one external channel."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = ["ModelAlertDeliveryResult"]


class ModelAlertDeliveryResult(BaseModel):
    """Returned by alert channel handlers instead of raising.

    Attributes:
        channel: ``webhook`` or ``email``.
        success: Whether the remote end accepted the alert.
        status_code: HTTP status returned, when a response was received.
        duration_ms: Time spent delivering.
        error: Sanitized failure description.
        correlation_id: Correlation id of the delivery attempt.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: str
    success: bool
    status_code: Optional[int] = None
    duration_ms: float = Field(default=0.0, ge=0)
    error: Optional[str] = None
    correlation_id: UUID
