# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Utility modules for content_factory_infra.

This package provides common utilities used across the infrastructure:
    - util_env_parsing: Type-safe environment variable parsing with validation
    - util_error_classifier: Rule-table classification of database failures
    - util_error_sanitization: Error message sanitization and DSN masking
"""

from content_factory_infra.utils.util_env_parsing import (
    detect_environment,
    parse_env_float,
    parse_env_int,
)
from content_factory_infra.utils.util_error_classifier import (
    DEFAULT_CLASSIFICATION_RULES,
    ErrorClassificationRule,
    classify_error,
)
from content_factory_infra.utils.util_error_sanitization import (
    SENSITIVE_PATTERNS,
    mask_dsn,
    mask_url,
    sanitize_error_message,
    sanitize_error_string,
)

__all__: list[str] = [
    "detect_environment",
    "parse_env_int",
    "parse_env_float",
    "DEFAULT_CLASSIFICATION_RULES",
    "ErrorClassificationRule",
    "classify_error",
    "SENSITIVE_PATTERNS",
    "mask_dsn",
    "mask_url",
    "sanitize_error_message",
    "sanitize_error_string",
]
