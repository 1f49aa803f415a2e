# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resilience primitives: circuit breaker and retry policies.

Exports:
    AsyncCircuitBreaker: Coroutine-safe per-resource circuit breaker
    RetryPolicy: Executes operations under named retry policies
    RetryPolicyConfig: Parameters of a named policy
    DEFAULT_RETRY_POLICIES: Built-in database/ai_service/integration policies
    calculate_delay: Capped exponential backoff delay in milliseconds
"""

from content_factory_infra.resilience.circuit_breaker import AsyncCircuitBreaker
from content_factory_infra.resilience.retry_policy import (
    DEFAULT_POLICY_NAME,
    DEFAULT_RETRY_POLICIES,
    RetryPolicy,
    RetryPolicyConfig,
    calculate_delay,
)

__all__: list[str] = [
    "AsyncCircuitBreaker",
    "DEFAULT_POLICY_NAME",
    "DEFAULT_RETRY_POLICIES",
    "RetryPolicy",
    "RetryPolicyConfig",
    "calculate_delay",
]
