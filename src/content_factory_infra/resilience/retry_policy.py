# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Named retry policies with capped exponential backoff.

Each failed attempt is classified with ``classify_error``. Non-retryable
failures and the failure of the final attempt re-raise the original
exception object unchanged; retryable failures sleep for

    delay(attempt) = min(base_delay_ms * 2 ** (attempt - 1), max_delay_ms)

(plus optional jitter, capped again at ``max_delay_ms``) and try again.

Built-in policies:

    ===========  ========  =======  =======
    name         attempts  base ms  max ms
    ===========  ========  =======  =======
    database     3         1000     5000
    ai_service   3         2000     10000
    integration  2         1500     8000
    ===========  ========  =======  =======

Unknown policy names fall back to ``database``.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Optional, TypeVar

from content_factory_infra.models import ModelErrorClassification
from content_factory_infra.utils import classify_error, sanitize_error_message

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLICY_NAME = "database"


@dataclass(frozen=True)
class RetryPolicyConfig:
    """Parameters of one named policy.

    Attributes:
        max_attempts: Total attempts including the first (>= 1).
        base_delay_ms: Delay after the first failed attempt.
        max_delay_ms: Upper bound of any single delay.
        exponential_backoff: Double the delay per attempt when True.
        jitter_ratio: Adds up to ``jitter_ratio * delay`` of random jitter.
    """

    max_attempts: int
    base_delay_ms: float
    max_delay_ms: float
    exponential_backoff: bool = True
    jitter_ratio: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("retry delays must be >= 0")
        if self.jitter_ratio < 0:
            raise ValueError(f"jitter_ratio must be >= 0, got {self.jitter_ratio}")


DEFAULT_RETRY_POLICIES: Mapping[str, RetryPolicyConfig] = {
    "database": RetryPolicyConfig(
        max_attempts=3, base_delay_ms=1000, max_delay_ms=5000
    ),
    "ai_service": RetryPolicyConfig(
        max_attempts=3, base_delay_ms=2000, max_delay_ms=10000
    ),
    "integration": RetryPolicyConfig(
        max_attempts=2, base_delay_ms=1500, max_delay_ms=8000
    ),
}


def calculate_delay(
    attempt: int,
    config: RetryPolicyConfig,
    rng: Callable[[float, float], float] = random.uniform,
) -> float:
    """Delay in milliseconds after failed ``attempt`` (1-based).

    Never exceeds ``config.max_delay_ms``.
    """
    if config.exponential_backoff:
        delay = config.base_delay_ms * (2 ** (attempt - 1))
    else:
        delay = config.base_delay_ms
    delay = min(delay, config.max_delay_ms)
    if config.jitter_ratio > 0:
        delay = min(delay + rng(0, config.jitter_ratio * delay), config.max_delay_ms)
    return delay


class RetryPolicy:
    """Executes operations under named retry policies.

    Args:
        policies: Policy table. Defaults to ``DEFAULT_RETRY_POLICIES``.
        classifier: Failure classifier. Defaults to ``classify_error``.
        sleep: Awaitable sleep taking seconds. Injectable for tests.
    """

    def __init__(
        self,
        policies: Optional[Mapping[str, RetryPolicyConfig]] = None,
        classifier: Callable[[BaseException], ModelErrorClassification] = classify_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._policies: dict[str, RetryPolicyConfig] = dict(
            policies if policies is not None else DEFAULT_RETRY_POLICIES
        )
        self._classifier = classifier
        self._sleep = sleep

    def get_policy(self, policy_name: str) -> RetryPolicyConfig:
        policy = self._policies.get(policy_name)
        if policy is None:
            logger.debug(
                f"Unknown retry policy {policy_name!r}, using {DEFAULT_POLICY_NAME!r}",
                extra={"policy": policy_name},
            )
            policy = self._policies.get(
                DEFAULT_POLICY_NAME, DEFAULT_RETRY_POLICIES[DEFAULT_POLICY_NAME]
            )
        return policy

    def set_policy(self, policy_name: str, config: RetryPolicyConfig) -> None:
        self._policies[policy_name] = config

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        policy_name: str = DEFAULT_POLICY_NAME,
        context: Optional[Mapping[str, object]] = None,
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    ) -> T:
        """Run ``operation`` under ``policy_name``.

        Args:
            operation: Zero-argument coroutine function.
            policy_name: Name of the policy to apply.
            context: Extra fields included in retry log records.
            on_retry: Called with ``(attempt, error, delay_ms)`` before each
                retry sleep.

        Returns:
            The operation's result.

        Raises:
            Exception: The original exception of the last attempt, or of the
                first non-retryable failure.
        """
        config = self.get_policy(policy_name)
        log_context = dict(context or {})

        attempt = 1
        while True:
            try:
                return await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                classification = self._classifier(e)
                if not classification.is_retryable or attempt >= config.max_attempts:
                    raise

                delay_ms = calculate_delay(attempt, config)
                logger.warning(
                    f"Retrying {policy_name} operation after attempt "
                    f"{attempt}/{config.max_attempts} in {delay_ms:.0f}ms",
                    extra={
                        "context": log_context,
                        "policy": policy_name,
                        "attempt": attempt,
                        "max_attempts": config.max_attempts,
                        "delay_ms": delay_ms,
                        "kind": classification.kind.value,
                        "error": sanitize_error_message(e),
                    },
                )
                if on_retry is not None:
                    on_retry(attempt, e, delay_ms)
                await self._sleep(delay_ms / 1000.0)
                attempt += 1


__all__: list[str] = [
    "DEFAULT_POLICY_NAME",
    "DEFAULT_RETRY_POLICIES",
    "RetryPolicy",
    "RetryPolicyConfig",
    "calculate_delay",
]
