# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Type-safe environment variable parsing with validation.

Configuration classes read numbers from the environment through these
helpers so that a malformed value fails loudly with a
``ProtocolConfigurationError`` naming the variable, instead of a bare
``ValueError`` from ``int()`` deep inside a constructor.
"""

from __future__ import annotations

import os

from content_factory_infra.enums import EnumInfraTransportType
from content_factory_infra.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)


def _error_context(
    transport_type: EnumInfraTransportType, service_name: str
) -> ModelInfraErrorContext:
    return ModelInfraErrorContext(
        transport_type=transport_type,
        operation="parse_env",
        target_name=service_name,
    )


def parse_env_int(
    name: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
    transport_type: EnumInfraTransportType = EnumInfraTransportType.RUNTIME,
    service_name: str = "config",
) -> int:
    """Read an integer environment variable.

    Args:
        name: Environment variable name
        default: Value used when the variable is unset or empty
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound
        transport_type: Transport recorded in the error context
        service_name: Target name recorded in the error context

    Raises:
        ProtocolConfigurationError: Value is not an integer or out of range
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ProtocolConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            context=_error_context(transport_type, service_name),
            variable=name,
        ) from e
    _check_bounds(name, value, min_value, max_value, transport_type, service_name)
    return value


def parse_env_float(
    name: str,
    default: float,
    *,
    min_value: float | None = None,
    max_value: float | None = None,
    transport_type: EnumInfraTransportType = EnumInfraTransportType.RUNTIME,
    service_name: str = "config",
) -> float:
    """Read a float environment variable. Same contract as ``parse_env_int``."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw.strip())
    except ValueError as e:
        raise ProtocolConfigurationError(
            f"{name} must be a number, got {raw!r}",
            context=_error_context(transport_type, service_name),
            variable=name,
        ) from e
    _check_bounds(name, value, min_value, max_value, transport_type, service_name)
    return value


def _check_bounds(
    name: str,
    value: float,
    min_value: float | None,
    max_value: float | None,
    transport_type: EnumInfraTransportType,
    service_name: str,
) -> None:
    if min_value is not None and value < min_value:
        raise ProtocolConfigurationError(
            f"{name} must be >= {min_value}, got {value}",
            context=_error_context(transport_type, service_name),
            variable=name,
        )
    if max_value is not None and value > max_value:
        raise ProtocolConfigurationError(
            f"{name} must be <= {max_value}, got {value}",
            context=_error_context(transport_type, service_name),
            variable=name,
        )


def detect_environment() -> str:
    """Detect the deployment environment name (lowercased)."""
    for var in ("ENVIRONMENT", "ENV", "DEPLOYMENT_ENV", "NODE_ENV"):
        value = os.getenv(var)
        if value:
            return value.lower()
    return "development"


__all__: list[str] = ["detect_environment", "parse_env_float", "parse_env_int"]
