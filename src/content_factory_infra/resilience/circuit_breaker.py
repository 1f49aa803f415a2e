# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coroutine-safe async circuit breaker for a single protected resource.

Circuit Breaker States:
    - CLOSED: Normal operation, calls pass, counted failures accumulate
    - OPEN: Circuit tripped, calls are rejected with ``CircuitOpenError``
      without invoking the operation
    - HALF_OPEN: Cooldown elapsed, exactly one probe call is admitted

State Transitions:
    CLOSED → OPEN: failure_count >= threshold
    OPEN → HALF_OPEN: now - last_failure_time >= cooldown_seconds
    HALF_OPEN → CLOSED: probe succeeded (failure_count reset to 0)
    HALF_OPEN → OPEN: probe failed (last_failure_time reset, cooldown restarts)
    any → CLOSED: ``reset()`` (operator override)

Usage:
    ```python
    breaker = AsyncCircuitBreaker(
        threshold=5,
        cooldown_seconds=30.0,
        service_name="postgres",
        transport_type=EnumInfraTransportType.DATABASE,
    )

    rows = await breaker.guard(
        lambda: pool.fetch("SELECT ..."),
        operation_name="list_posts",
        correlation_id=correlation_id,
    )
    ```

Concurrency Safety:
    Every read and write of breaker state happens while holding
    ``self._lock`` (an ``asyncio.Lock``). The lock is never held while the
    guarded operation runs, so a slow call does not serialise other callers.
    The lock is coroutine-safe, not thread-safe.

    Completions update the counters in completion order, so with concurrent
    callers ``failure_count`` reflects the temporal order in which failures
    were observed, not the order calls were submitted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar
from uuid import UUID, uuid4

from content_factory_infra.enums import (
    EnumCircuitBreakerState,
    EnumInfraTransportType,
)
from content_factory_infra.errors import CircuitOpenError, ModelInfraErrorContext
from content_factory_infra.models import ModelCircuitBreakerSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _always_counts(_: BaseException) -> bool:
    return True


class AsyncCircuitBreaker:
    """Per-resource circuit breaker.

    Owned by exactly one component (the connection manager it protects);
    never share an instance across unrelated resources.

    Args:
        threshold: Counted failures that open the circuit (>= 1).
        cooldown_seconds: Time OPEN before a probe is admitted (>= 0).
        service_name: Protected resource, used in errors and logs.
        transport_type: Transport recorded in the error context.
        clock: Monotonic clock. Injectable for tests.
    """

    def __init__(
        self,
        threshold: int = 5,
        cooldown_seconds: float = 30.0,
        service_name: str = "unknown",
        transport_type: EnumInfraTransportType = EnumInfraTransportType.DATABASE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if threshold < 1:
            raise ValueError(f"Circuit breaker threshold must be >= 1, got {threshold}")
        if cooldown_seconds < 0:
            raise ValueError(
                f"Circuit breaker cooldown_seconds must be >= 0, got {cooldown_seconds}"
            )

        self.threshold = threshold
        self.cooldown_seconds = cooldown_seconds
        self.service_name = service_name
        self.transport_type = transport_type
        self._clock = clock

        self._state = EnumCircuitBreakerState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None
        self._probe_in_flight = False
        self._lock = asyncio.Lock()

        logger.debug(
            f"Circuit breaker initialized for {service_name}",
            extra={
                "threshold": threshold,
                "cooldown_seconds": cooldown_seconds,
                "transport_type": transport_type.value,
            },
        )

    @property
    def state(self) -> EnumCircuitBreakerState:
        """Stored state. OPEN is reported until a caller triggers the probe."""
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def is_open(self) -> bool:
        return self._state is not EnumCircuitBreakerState.CLOSED

    def _retry_after(self, now: float) -> float:
        if self._state is EnumCircuitBreakerState.CLOSED:
            return 0.0
        if self._last_failure_time is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (now - self._last_failure_time))

    def _rejection(
        self, operation_name: str, correlation_id: Optional[UUID], now: float
    ) -> CircuitOpenError:
        context = ModelInfraErrorContext(
            transport_type=self.transport_type,
            operation=operation_name,
            target_name=self.service_name,
            correlation_id=correlation_id if correlation_id else uuid4(),
        )
        circuit_state = (
            "half_open" if self._state is EnumCircuitBreakerState.HALF_OPEN else "open"
        )
        return CircuitOpenError(
            f"Circuit breaker is open - {self.service_name} temporarily unavailable",
            context=context,
            circuit_state=circuit_state,
            retry_after_seconds=round(self._retry_after(now), 3),
        )

    async def before_call(
        self, operation_name: str, correlation_id: Optional[UUID] = None
    ) -> bool:
        """Admit or reject a call.

        Returns:
            True when the admitted call is the HALF_OPEN probe.

        Raises:
            CircuitOpenError: The circuit is OPEN and cooling down, or a probe
                is already in flight.
        """
        async with self._lock:
            now = self._clock()
            if self._state is EnumCircuitBreakerState.CLOSED:
                return False

            if self._state is EnumCircuitBreakerState.OPEN:
                elapsed = now - (self._last_failure_time or now)
                if elapsed < self.cooldown_seconds:
                    raise self._rejection(operation_name, correlation_id, now)
                self._state = EnumCircuitBreakerState.HALF_OPEN
                logger.info(
                    f"Circuit breaker transitioning to half-open for {self.service_name}",
                    extra={"service": self.service_name, "operation": operation_name},
                )

            # HALF_OPEN: only one probe at a time.
            if self._probe_in_flight:
                raise self._rejection(operation_name, correlation_id, now)
            self._probe_in_flight = True
            return True

    async def record_success(self, is_probe: bool = False) -> None:
        async with self._lock:
            if not is_probe:
                if self._state is EnumCircuitBreakerState.CLOSED:
                    self._failure_count = 0
                # A late success of a call admitted before the circuit opened
                # does not close it; only the probe can.
                return
            self._probe_in_flight = False
            self._state = EnumCircuitBreakerState.CLOSED
            self._failure_count = 0
            logger.info(
                f"Circuit breaker closed for {self.service_name}",
                extra={"service": self.service_name},
            )

    async def record_failure(
        self,
        operation_name: str,
        correlation_id: Optional[UUID] = None,
        is_probe: bool = False,
    ) -> None:
        async with self._lock:
            now = self._clock()
            if is_probe:
                self._probe_in_flight = False
                self._state = EnumCircuitBreakerState.OPEN
                self._failure_count += 1
                self._last_failure_time = now
                logger.warning(
                    f"Circuit breaker probe failed, reopening for {self.service_name}",
                    extra={
                        "service": self.service_name,
                        "operation": operation_name,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )
                return

            if self._state is not EnumCircuitBreakerState.CLOSED:
                # Late completion of a call admitted before the circuit opened.
                return

            self._failure_count += 1
            self._last_failure_time = now
            if self._failure_count >= self.threshold:
                self._state = EnumCircuitBreakerState.OPEN
                logger.warning(
                    f"Circuit breaker opened for {self.service_name} after "
                    f"{self._failure_count} failures",
                    extra={
                        "service": self.service_name,
                        "operation": operation_name,
                        "failure_count": self._failure_count,
                        "cooldown_seconds": self.cooldown_seconds,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )

    async def release_probe(self) -> None:
        """Free the probe slot without judging the resource (e.g. client error)."""
        async with self._lock:
            self._probe_in_flight = False

    async def guard(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        operation_name: str = "operation",
        correlation_id: Optional[UUID] = None,
        counts_as_failure: Callable[[BaseException], bool] = _always_counts,
    ) -> T:
        """Run ``operation`` if the circuit admits it.

        Args:
            operation: Zero-argument coroutine function to protect.
            operation_name: Name used in errors and logs.
            correlation_id: Propagated into ``CircuitOpenError``.
            counts_as_failure: Decides which exceptions are evidence of an
                unhealthy resource. Exceptions for which it returns False
                propagate without touching the counters.

        Raises:
            CircuitOpenError: Rejected without invoking ``operation``.
        """
        is_probe = await self.before_call(operation_name, correlation_id)
        try:
            result = await operation()
        except asyncio.CancelledError:
            if is_probe:
                await self.release_probe()
            raise
        except Exception as e:
            if counts_as_failure(e):
                await self.record_failure(operation_name, correlation_id, is_probe)
            elif is_probe:
                await self.release_probe()
            raise
        await self.record_success(is_probe)
        return result

    async def reset(self) -> None:
        """Force CLOSED regardless of counters (administrative override)."""
        async with self._lock:
            self._state = EnumCircuitBreakerState.CLOSED
            self._failure_count = 0
            self._last_failure_time = None
            self._probe_in_flight = False
        logger.info(
            f"Circuit breaker manually reset for {self.service_name}",
            extra={"service": self.service_name},
        )

    def snapshot(self) -> ModelCircuitBreakerSnapshot:
        now = self._clock()
        return ModelCircuitBreakerSnapshot(
            service_name=self.service_name,
            state=self._state,
            is_open=self.is_open,
            failure_count=self._failure_count,
            last_failure_time=self._last_failure_time,
            threshold=self.threshold,
            cooldown_seconds=self.cooldown_seconds,
            retry_after_seconds=self._retry_after(now),
        )


__all__: list[str] = ["AsyncCircuitBreaker"]
