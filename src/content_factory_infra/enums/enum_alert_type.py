# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Alert Type Enumeration.

Severity attached to alerts raised by the monitoring service. The console
channel maps each type onto a logging level.
"""

import logging
from enum import Enum


class EnumAlertType(str, Enum):
    """Alert severity levels, lowest to highest: info, warning, error, critical."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        """Logging level used when the alert is written to the console."""
        return {
            EnumAlertType.INFO: logging.INFO,
            EnumAlertType.WARNING: logging.WARNING,
            EnumAlertType.ERROR: logging.ERROR,
            EnumAlertType.CRITICAL: logging.CRITICAL,
        }[self]


__all__ = ["EnumAlertType"]
