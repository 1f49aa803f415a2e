# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Immutable metric observation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

__all__: list[str] = ["ModelMetricPoint"]


@dataclass(frozen=True, slots=True)
class ModelMetricPoint:
    """One observation appended to a metric series.

    Attributes:
        timestamp: Epoch seconds. Non-decreasing within a series.
        value: Observed value.
        tags: Optional string tags (endpoint, operation, ...).
        unit: Optional unit label (``ms``, ``count``, ...).
    """

    timestamp: float
    value: float
    tags: Mapping[str, str] = field(default_factory=dict)
    unit: Optional[str] = None
