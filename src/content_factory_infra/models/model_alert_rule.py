# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Custom threshold rule evaluated on every health check."""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from content_factory_infra.enums import EnumAlertComparison, EnumAlertType

__all__: list[str] = ["ModelAlertRule"]


class ModelAlertRule(BaseModel):
    """Alert when a metric's windowed average crosses a threshold.

    Example:
        >>> rule = ModelAlertRule(
        ...     name="Slow queries",
        ...     metric_name="database_operation_duration",
        ...     comparison=EnumAlertComparison.GT,
        ...     threshold=250.0,
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, description="Used as the alert title")
    metric_name: str = Field(min_length=1)
    comparison: EnumAlertComparison
    threshold: float
    window_seconds: float = Field(default=300.0, gt=0)
    alert_type: EnumAlertType = EnumAlertType.WARNING
    enabled: bool = True
