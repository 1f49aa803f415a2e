# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for RetryPolicy.

Tests backoff calculation, the attempt budget, short-circuiting of
non-retryable failures, cancellation and policy lookup. Sleeps are recorded
rather than awaited.
"""

from __future__ import annotations

import asyncio

import pytest

from content_factory_infra.resilience import (
    DEFAULT_RETRY_POLICIES,
    RetryPolicy,
    RetryPolicyConfig,
    calculate_delay,
)
from tests.helpers.db_fakes import RecordingSleep


class _FlakyOperation:
    """Fails with the queued errors, then returns ``result``."""

    def __init__(self, errors: list[BaseException], result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestCalculateDelay:
    def test_exponential_growth(self) -> None:
        config = RetryPolicyConfig(max_attempts=5, base_delay_ms=100, max_delay_ms=10_000)
        assert [calculate_delay(n, config) for n in (1, 2, 3, 4)] == [100, 200, 400, 800]

    def test_capped_at_max_delay(self) -> None:
        config = DEFAULT_RETRY_POLICIES["database"]
        assert calculate_delay(10, config) == config.max_delay_ms

    def test_linear_when_exponential_disabled(self) -> None:
        config = RetryPolicyConfig(
            max_attempts=3, base_delay_ms=250, max_delay_ms=1000, exponential_backoff=False
        )
        assert calculate_delay(3, config) == 250

    def test_jitter_never_exceeds_max(self) -> None:
        config = RetryPolicyConfig(
            max_attempts=3, base_delay_ms=900, max_delay_ms=1000, jitter_ratio=0.5
        )
        assert calculate_delay(1, config, rng=lambda low, high: high) == 1000

    def test_invalid_config(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicyConfig(max_attempts=0, base_delay_ms=1, max_delay_ms=1)


class TestWithRetry:
    @pytest.fixture
    def sleep(self) -> RecordingSleep:
        return RecordingSleep()

    @pytest.fixture
    def policy(self, sleep: RecordingSleep) -> RetryPolicy:
        return RetryPolicy(
            policies={
                "database": RetryPolicyConfig(
                    max_attempts=3, base_delay_ms=100, max_delay_ms=150
                )
            },
            sleep=sleep,
        )

    @pytest.mark.asyncio
    async def test_success_first_try(self, policy: RetryPolicy, sleep: RecordingSleep) -> None:
        operation = _FlakyOperation([])
        assert await policy.with_retry(operation, "database") == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retryable_failures_then_success(
        self, policy: RetryPolicy, sleep: RecordingSleep
    ) -> None:
        operation = _FlakyOperation(
            [ConnectionError("connection reset"), TimeoutError("timeout")]
        )
        assert await policy.with_retry(operation, "database") == "ok"
        assert operation.calls == 3
        # Second delay is capped at max_delay_ms.
        assert sleep.delays == [0.1, 0.15]

    @pytest.mark.asyncio
    async def test_budget_exhausted_reraises_original(
        self, policy: RetryPolicy, sleep: RecordingSleep
    ) -> None:
        last = ConnectionError("connection refused #3")
        operation = _FlakyOperation(
            [ConnectionError("connection refused #1"), ConnectionError("#2 connect"), last]
        )
        with pytest.raises(ConnectionError) as exc_info:
            await policy.with_retry(operation, "database")
        assert exc_info.value is last
        assert operation.calls == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_non_retryable_short_circuits(
        self, policy: RetryPolicy, sleep: RecordingSleep
    ) -> None:
        error = ValueError("duplicate key value violates unique constraint")
        operation = _FlakyOperation([error])
        with pytest.raises(ValueError) as exc_info:
            await policy.with_retry(operation, "database")
        assert exc_info.value is error
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_on_retry_callback(self, policy: RetryPolicy) -> None:
        seen: list[tuple[int, float]] = []
        operation = _FlakyOperation([ConnectionError("connection lost")])
        await policy.with_retry(
            operation,
            "database",
            on_retry=lambda attempt, error, delay_ms: seen.append((attempt, delay_ms)),
        )
        assert seen == [(1, 100)]

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self, sleep: RecordingSleep) -> None:
        policy = RetryPolicy(sleep=sleep)
        calls = 0

        async def cancelled() -> None:
            nonlocal calls
            calls += 1
            raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await policy.with_retry(cancelled, "database")
        assert calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_cancelled_during_backoff(self) -> None:
        policy = RetryPolicy()
        operation = _FlakyOperation([ConnectionError("connection lost")] * 3)
        task = asyncio.create_task(policy.with_retry(operation, "database"))
        while operation.calls == 0:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert operation.calls == 1


class TestPolicyLookup:
    def test_builtin_policies(self) -> None:
        assert DEFAULT_RETRY_POLICIES["database"].max_attempts == 3
        assert DEFAULT_RETRY_POLICIES["ai_service"].base_delay_ms == 2000
        assert DEFAULT_RETRY_POLICIES["integration"].max_attempts == 2

    def test_unknown_policy_falls_back_to_database(self) -> None:
        policy = RetryPolicy()
        assert policy.get_policy("no-such-policy") == DEFAULT_RETRY_POLICIES["database"]

    def test_set_policy(self) -> None:
        policy = RetryPolicy()
        custom = RetryPolicyConfig(max_attempts=1, base_delay_ms=0, max_delay_ms=0)
        policy.set_policy("webhooks", custom)
        assert policy.get_policy("webhooks") is custom
