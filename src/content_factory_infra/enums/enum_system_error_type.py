# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""System Error Type Enumeration.

Subsystem attribution for entries in the monitoring service's error log.
This is a different layer from ``EnumDbErrorKind``: it answers *where* a
failure happened, not *why*.
"""

from enum import Enum

from content_factory_infra.enums.enum_alert_type import EnumAlertType


class EnumSystemErrorType(str, Enum):
    """Subsystem that produced a recorded error."""

    DATABASE = "database"
    AI_SERVICE = "ai_service"
    AUTHENTICATION = "authentication"
    INTEGRATION = "integration"
    APPLICATION = "application"

    @property
    def alert_type(self) -> EnumAlertType:
        """Alert severity raised when an error of this type is recorded."""
        if self in {EnumSystemErrorType.DATABASE, EnumSystemErrorType.AUTHENTICATION}:
            return EnumAlertType.CRITICAL
        return EnumAlertType.ERROR

    @property
    def title(self) -> str:
        """Human readable title prefix, e.g. ``"Ai Service"``."""
        return self.value.replace("_", " ").title()


__all__ = ["EnumSystemErrorType"]
