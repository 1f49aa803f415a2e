# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types used in error context and log records.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Transport types for infrastructure components.

    Attributes:
        HTTP: Outbound HTTP (alert webhooks, email relay) and the health server
        DATABASE: PostgreSQL connection pool
        RUNTIME: Process internal work (background loops, configuration)
    """

    HTTP = "http"
    DATABASE = "db"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
