# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Comparison operators for custom alert rules."""

import operator
from enum import Enum


class EnumAlertComparison(str, Enum):
    """How an alert rule compares the observed value with its threshold."""

    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"

    def evaluate(self, observed: float, threshold: float) -> bool:
        """Return True when ``observed`` breaches ``threshold``."""
        op = {
            EnumAlertComparison.GT: operator.gt,
            EnumAlertComparison.GTE: operator.ge,
            EnumAlertComparison.LT: operator.lt,
            EnumAlertComparison.LTE: operator.le,
        }[self]
        return op(observed, threshold)


__all__ = ["EnumAlertComparison"]
