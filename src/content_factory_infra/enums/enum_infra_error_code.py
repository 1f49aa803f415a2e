# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure error codes carried by every ``RuntimeHostError``."""

from enum import Enum


class EnumInfraErrorCode(str, Enum):
    """Stable, machine readable error codes for infrastructure failures."""

    OPERATION_FAILED = "OPERATION_FAILED"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    DATABASE_CONNECTION_ERROR = "DATABASE_CONNECTION_ERROR"
    DATABASE_OPERATION_ERROR = "DATABASE_OPERATION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"


__all__ = ["EnumInfraErrorCode"]
