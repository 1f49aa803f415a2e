# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Database Connection Manager.

Owns the asyncpg pool for the application's PostgreSQL store and routes all
data access through the circuit breaker and the ``database`` retry policy.

Call path of ``execute_query``:

    AsyncCircuitBreaker.guard
        -> RetryPolicy.with_retry (classify_error decides retryability)
            -> pool.acquire() -> operation(conn)

Features:
- Connection pooling with configurable min/max connections
- Classified failures (``DatabaseOperationError`` carries kind, retryability
  and the suggested action)
- Circuit breaker that only counts failures proving the store is unhealthy;
  constraint, query and permission errors are the caller's fault
- Background reconnect with capped exponential backoff and a hard
  "unavailable" state once attempts are exhausted
- Transactions with compensating rollback handlers run in reverse order
- Lifetime counters, bounded query history and metrics store recording
- Periodic health monitoring task with deterministic shutdown
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Optional, TypeVar, Union
from uuid import UUID, uuid4

import asyncpg

from content_factory_infra.enums import EnumDbErrorKind, EnumInfraTransportType
from content_factory_infra.errors import (
    CircuitOpenError,
    DatabaseOperationError,
    InfraConnectionError,
    InfraUnavailableError,
    ModelInfraErrorContext,
)
from content_factory_infra.infrastructure.connection_config import ConnectionConfig
from content_factory_infra.models import (
    ModelConnectionHealth,
    ModelConnectionMetrics,
    ModelConnectionStatus,
    ModelQueryRecord,
    ModelTransactionContext,
    ModelTransactionOperation,
    TransactionApply,
)
from content_factory_infra.resilience import (
    AsyncCircuitBreaker,
    RetryPolicy,
    RetryPolicyConfig,
)
from content_factory_infra.resilience.retry_policy import DEFAULT_RETRY_POLICIES
from content_factory_infra.utils import classify_error, sanitize_error_message

if TYPE_CHECKING:
    from content_factory_infra.observability.metrics_store import MetricsStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

PoolFactory = Callable[[ConnectionConfig], Awaitable[Any]]
QueryOperation = Callable[[Any], Awaitable[T]]


async def create_asyncpg_pool(config: ConnectionConfig) -> asyncpg.Pool:
    """Default pool factory."""
    return await asyncpg.create_pool(
        dsn=config.dsn,
        min_size=config.min_connections,
        max_size=config.max_connections,
        timeout=config.connect_timeout_seconds,
        command_timeout=config.command_timeout_seconds,
        max_inactive_connection_lifetime=config.idle_timeout_seconds,
    )


def _counts_towards_breaker(error: BaseException) -> bool:
    return not classify_error(error).kind.is_client_error


class DatabaseConnectionManager:
    """
    PostgreSQL connection manager with resilience and monitoring.

    Constructed explicitly and owned by process startup code
    (see ``InfraContainer``); there is no module-level instance.

    Args:
        config: Connection configuration.
        metrics_store: Optional store receiving ``database_*`` metrics.
        retry_policy: Retry executor. Defaults to one whose ``database``
            policy follows ``config.retry_*``.
        circuit_breaker: Breaker protecting this store. Defaults to one built
            from ``config.circuit_*``.
        pool_factory: Coroutine creating the pool from the config.
        sleep: Awaitable sleep used for retry and reconnect backoff and the
            health monitor interval.
        clock: Monotonic clock handed to the default circuit breaker.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        metrics_store: Optional[MetricsStore] = None,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[AsyncCircuitBreaker] = None,
        pool_factory: PoolFactory = create_asyncpg_pool,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._metrics_store = metrics_store
        self._pool_factory = pool_factory
        self._sleep = sleep

        if retry_policy is None:
            policies = dict(DEFAULT_RETRY_POLICIES)
            policies["database"] = RetryPolicyConfig(
                max_attempts=config.retry_attempts,
                base_delay_ms=config.retry_delay_ms,
                max_delay_ms=config.retry_max_delay_ms,
            )
            retry_policy = RetryPolicy(policies=policies, sleep=sleep)
        self._retry_policy = retry_policy

        self.circuit_breaker = circuit_breaker or AsyncCircuitBreaker(
            threshold=config.circuit_threshold,
            cooldown_seconds=config.circuit_cooldown_seconds,
            service_name=config.service_name,
            transport_type=EnumInfraTransportType.DATABASE,
            clock=clock,
        )

        self.pool: Optional[Any] = None
        self.is_initialized = False
        self.health = ModelConnectionHealth()
        self.active_transactions: dict[str, ModelTransactionContext] = {}

        # Lifetime counters
        self._total_queries = 0
        self._successful_queries = 0
        self._failed_queries = 0
        self._retried_attempts = 0
        self._average_response_time_ms = 0.0
        self._total_reconnects = 0

        self._query_history: deque[ModelQueryRecord] = deque(
            maxlen=config.query_history_size
        )

        self._reconnect_attempts = 0
        self._is_unavailable = False
        self._is_shutting_down = False
        self._reconnect_lock = asyncio.Lock()
        self._reconnect_task: Optional[asyncio.Task[bool]] = None
        self._health_task: Optional[asyncio.Task[None]] = None
        self._last_health_check: Optional[datetime] = None
        self._started_at = datetime.now(UTC)

    def __repr__(self) -> str:
        return (
            f"DatabaseConnectionManager(config={self.config!r}, "
            f"initialized={self.is_initialized})"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _error_context(
        self, operation: str, correlation_id: Optional[UUID] = None
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.DATABASE,
            operation=operation,
            target_name=self.config.service_name,
            correlation_id=correlation_id,
        )

    async def initialize(self) -> None:
        """Create the connection pool. Idempotent.

        Raises:
            InfraConnectionError: The pool could not be created.
        """
        if self.is_initialized:
            return

        try:
            self.pool = await self._pool_factory(self.config)
        except Exception as e:
            raise InfraConnectionError(
                f"Failed to initialize PostgreSQL connection pool: "
                f"{sanitize_error_message(e)}",
                context=self._error_context("initialize"),
            ) from e

        self.is_initialized = True
        self._is_shutting_down = False
        logger.info(
            "Database connection pool created",
            extra={
                "min_connections": self.config.min_connections,
                "max_connections": self.config.max_connections,
            },
        )

    async def _close_pool(self) -> None:
        pool, self.pool = self.pool, None
        if pool is None:
            return
        try:
            await pool.close()
        except Exception as e:
            logger.warning(
                f"Error closing database pool: {sanitize_error_message(e)}",
                extra={"operation": "close_pool"},
            )

    async def refresh_pool(self) -> None:
        """Close the current pool and create a new one.

        Clears the unavailable state and the reconnect counter on success.

        Raises:
            InfraConnectionError: The new pool could not be created.
        """
        await self._close_pool()
        try:
            self.pool = await self._pool_factory(self.config)
        except Exception as e:
            raise InfraConnectionError(
                f"Failed to refresh database connection pool: "
                f"{sanitize_error_message(e)}",
                context=self._error_context("refresh_pool"),
            ) from e
        self.is_initialized = True
        self._reconnect_attempts = 0
        self._is_unavailable = False
        logger.info("Database connection pool refreshed", extra={"operation": "pool_refresh"})

    async def shutdown(self) -> None:
        """Stop background tasks and close the pool. Idempotent, never raises."""
        self._is_shutting_down = True
        await self.stop_health_monitoring()

        task, self._reconnect_task = self._reconnect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(
                    f"Reconnect task failed during shutdown: {sanitize_error_message(e)}"
                )

        await self._close_pool()
        self.is_initialized = False
        logger.info("Database connection manager shut down", extra={"operation": "shutdown"})

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    async def _prepare(self, operation: str, correlation_id: UUID) -> None:
        if not self.is_initialized:
            await self.initialize()
        if self.pool is None and self._is_unavailable:
            raise InfraUnavailableError(
                f"Database unavailable after {self.config.max_reconnect_attempts} "
                f"reconnect attempts",
                context=self._error_context(operation, correlation_id),
                reconnect_attempts=self._reconnect_attempts,
            )

    def _current_pool(self, operation: str, correlation_id: UUID) -> Any:
        pool = self.pool
        if pool is None:
            raise InfraConnectionError(
                "No database connection pool available",
                context=self._error_context(operation, correlation_id),
            )
        return pool

    async def execute_query(
        self,
        operation: QueryOperation[T],
        context: Optional[Mapping[str, object]] = None,
        *,
        operation_name: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> T:
        """Run ``operation`` on a pooled connection with retry and circuit breaking.

        Args:
            operation: Coroutine function receiving an asyncpg connection.
            context: Caller context; ``operation`` and ``correlation_id`` keys
                are honoured, everything else is added to log records.
            operation_name: Name used in metrics and logs.
            correlation_id: Correlation id (generated when absent).

        Returns:
            The operation's result.

        Raises:
            CircuitOpenError: The breaker rejected the call.
            InfraUnavailableError: Reconnect attempts are exhausted.
            DatabaseOperationError: Final classified failure, chained from the
                driver exception.
        """
        ctx = dict(context or {})
        name = operation_name or str(
            ctx.pop("operation", getattr(operation, "__name__", "query"))
        )
        correlation_id = correlation_id or _correlation_from(ctx) or uuid4()

        await self._prepare(name, correlation_id)

        attempts = 0

        async def attempt() -> T:
            nonlocal attempts
            attempts += 1
            pool = self._current_pool(name, correlation_id)
            async with pool.acquire() as conn:
                return await operation(conn)

        async def with_retry() -> T:
            return await self._retry_policy.with_retry(
                attempt,
                "database",
                context={
                    **ctx,
                    "operation": name,
                    "correlation_id": str(correlation_id),
                },
            )

        start = time.perf_counter()
        try:
            result = await self.circuit_breaker.guard(
                with_retry,
                operation_name=name,
                correlation_id=correlation_id,
                counts_as_failure=_counts_towards_breaker,
            )
        except CircuitOpenError:
            logger.debug(
                f"Database operation {name} rejected by open circuit",
                extra={"operation": name, "correlation_id": str(correlation_id)},
            )
            raise
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            kind = classify_error(e).kind
            self._record_failure(name, duration_ms, attempts, kind, e, correlation_id)
            if kind.triggers_reconnect:
                self._schedule_reconnect()
            raise DatabaseOperationError(
                f"Database operation '{name}' failed: {sanitize_error_message(e)}",
                kind=kind,
                context=self._error_context(name, correlation_id),
                attempts=attempts,
            ) from e

        duration_ms = (time.perf_counter() - start) * 1000
        self._record_success(name, duration_ms, attempts, correlation_id)
        return result

    async def execute_transaction(
        self,
        operations: Sequence[Union[ModelTransactionOperation, TransactionApply]],
        context: Optional[Mapping[str, object]] = None,
    ) -> list[Any]:
        """Apply ``operations`` in order inside one database transaction.

        On failure the database transaction is rolled back, then the
        compensating rollback handlers of every applied operation run in
        reverse order. A failing handler is logged and the remaining
        handlers still run. The exception that caused the failure is
        re-raised unchanged.

        Transactions are guarded by the circuit breaker but never retried.

        Returns:
            Results of the operations, in order.
        """
        ctx = dict(context or {})
        name = str(ctx.pop("operation", "transaction"))
        correlation_id = _correlation_from(ctx) or uuid4()
        steps = [
            op
            if isinstance(op, ModelTransactionOperation)
            else ModelTransactionOperation(apply=op)
            for op in operations
        ]

        await self._prepare(name, correlation_id)

        tx = ModelTransactionContext()
        self.active_transactions[tx.id] = tx

        async def run() -> list[Any]:
            pool = self._current_pool(name, correlation_id)
            async with pool.acquire() as conn:
                transaction = conn.transaction()
                await transaction.start()
                results: list[Any] = []
                try:
                    for step in steps:
                        results.append(await step.apply(conn))
                        tx.operations.append(step.name)
                        if step.rollback is not None:
                            tx.rollback_handlers.append(step.rollback)
                except BaseException:
                    try:
                        await transaction.rollback()
                    except Exception as rollback_error:
                        logger.exception(
                            f"Database rollback failed for {tx.id}: "
                            f"{sanitize_error_message(rollback_error)}",
                            extra={"transaction_id": tx.id},
                        )
                    raise
                await transaction.commit()
                return results

        start = time.perf_counter()
        try:
            results = await self.circuit_breaker.guard(
                run,
                operation_name=name,
                correlation_id=correlation_id,
                counts_as_failure=_counts_towards_breaker,
            )
        except CircuitOpenError:
            self.active_transactions.pop(tx.id, None)
            raise
        except BaseException as e:
            await self._run_rollback_handlers(tx, correlation_id)
            self.active_transactions.pop(tx.id, None)
            if isinstance(e, Exception):
                duration_ms = (time.perf_counter() - start) * 1000
                kind = classify_error(e).kind
                self._record_failure(name, duration_ms, 1, kind, e, correlation_id)
                if kind.triggers_reconnect:
                    self._schedule_reconnect()
            raise

        self.active_transactions.pop(tx.id, None)
        duration_ms = (time.perf_counter() - start) * 1000
        self._record_success(name, duration_ms, 1, correlation_id)
        logger.debug(
            f"Transaction {tx.id} committed",
            extra={"transaction_id": tx.id, "operations": list(tx.operations)},
        )
        return results

    async def _run_rollback_handlers(
        self, tx: ModelTransactionContext, correlation_id: UUID
    ) -> None:
        for handler in reversed(tx.rollback_handlers):
            try:
                await handler()
            except Exception as e:
                logger.error(
                    f"Rollback handler failed for {tx.id}: {sanitize_error_message(e)}",
                    extra={
                        "transaction_id": tx.id,
                        "correlation_id": str(correlation_id),
                    },
                )

    async def with_graceful_degradation(
        self,
        operation: QueryOperation[T],
        fallback: T,
        context: Optional[Mapping[str, object]] = None,
    ) -> T:
        """Run ``operation``; return ``fallback`` when the store is unreachable.

        Client errors (constraint, query, permission) still propagate.
        """
        try:
            return await self.execute_query(operation, context)
        except InfraUnavailableError as e:
            logger.warning(f"Serving fallback, database unavailable: {e.message}")
            return fallback
        except DatabaseOperationError as e:
            if not e.kind.triggers_reconnect:
                raise
            logger.warning(
                f"Serving fallback after {e.kind.value}",
                extra={"kind": e.kind.value},
            )
            return fallback

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _record_success(
        self, operation: str, duration_ms: float, attempts: int, correlation_id: UUID
    ) -> None:
        self.health.record_success(duration_ms)
        self._is_unavailable = False
        self._reconnect_attempts = 0
        self._successful_queries += 1
        self._count_query(duration_ms, attempts)
        self._append_history(
            ModelQueryRecord(
                timestamp=datetime.now(UTC),
                operation=operation,
                duration_ms=duration_ms,
                success=True,
                attempts=attempts,
                correlation_id=correlation_id,
            )
        )
        if self._metrics_store is not None:
            self._metrics_store.record_database_metrics(operation, duration_ms, True)

    def _record_failure(
        self,
        operation: str,
        duration_ms: float,
        attempts: int,
        kind: EnumDbErrorKind,
        error: BaseException,
        correlation_id: UUID,
    ) -> None:
        if kind.is_client_error:
            # The store answered; the connection itself is fine.
            self.health.record_success(duration_ms)
        else:
            self.health.record_failure(duration_ms)
        self._failed_queries += 1
        self._count_query(duration_ms, attempts)
        self._append_history(
            ModelQueryRecord(
                timestamp=datetime.now(UTC),
                operation=operation,
                duration_ms=duration_ms,
                success=False,
                attempts=attempts,
                kind=kind,
                correlation_id=correlation_id,
            )
        )
        if self._metrics_store is not None:
            self._metrics_store.record_database_metrics(
                operation, duration_ms, False, error=kind.value
            )
        logger.error(
            f"Database operation {operation} failed: {sanitize_error_message(error)}",
            extra={
                "operation": operation,
                "kind": kind.value,
                "attempts": attempts,
                "is_retryable": kind.is_retryable,
                "suggested_action": kind.suggested_action,
                "correlation_id": str(correlation_id),
            },
        )

    def _count_query(self, duration_ms: float, attempts: int) -> None:
        self._total_queries += 1
        self._retried_attempts += max(0, attempts - 1)
        # Lifetime running mean.
        total = self._average_response_time_ms * (self._total_queries - 1)
        self._average_response_time_ms = (total + duration_ms) / self._total_queries

    def _append_history(self, record: ModelQueryRecord) -> None:
        self._query_history.append(record)
        cutoff = record.timestamp - timedelta(
            seconds=self.config.query_history_retention_seconds
        )
        while self._query_history and self._query_history[0].timestamp < cutoff:
            self._query_history.popleft()

    # ------------------------------------------------------------------
    # Health and reconnect
    # ------------------------------------------------------------------

    async def test_connection(self) -> bool:
        """Round-trip ``SELECT 1``. Updates connection health, never raises."""
        start = time.perf_counter()
        pool = self.pool
        if pool is None:
            self.health.record_failure(0.0)
            return False
        try:
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.health.record_failure(duration_ms)
            logger.warning(
                f"Database connection test failed: {sanitize_error_message(e)}",
                extra={"operation": "connection_test"},
            )
            if self._metrics_store is not None:
                self._metrics_store.record_database_metrics(
                    "connection_test", duration_ms, False, error=sanitize_error_message(e)
                )
            return False

        duration_ms = (time.perf_counter() - start) * 1000
        self.health.record_success(duration_ms)
        if self._metrics_store is not None:
            self._metrics_store.record_database_metrics(
                "connection_test", duration_ms, True
            )
        return True

    def reconnect_delay_seconds(self, attempt: int) -> float:
        """Backoff before reconnect ``attempt`` (1-based), capped."""
        return min(
            self.config.reconnect_delay_seconds * (2 ** (attempt - 1)),
            self.config.reconnect_max_delay_seconds,
        )

    async def reconnect(self) -> bool:
        """Recreate the pool with capped exponential backoff.

        Serialised by a lock. Returns True once a new pool passes
        ``test_connection``; after ``max_reconnect_attempts`` failures the
        manager enters the unavailable state and False is returned.

        The unavailable state is sticky: neither failed operations nor the
        health monitor schedule further attempts, and queries fail fast with
        ``InfraUnavailableError`` once no pool is left. Call ``refresh_pool()``
        to leave it; ``reset_circuit_breaker()`` only clears the breaker and
        the failure streak.
        """
        async with self._reconnect_lock:
            while (
                not self._is_shutting_down
                and self._reconnect_attempts < self.config.max_reconnect_attempts
            ):
                self._reconnect_attempts += 1
                attempt = self._reconnect_attempts
                delay = self.reconnect_delay_seconds(attempt)
                try:
                    await self._close_pool()
                    await self._sleep(delay)
                    self.pool = await self._pool_factory(self.config)
                    if await self.test_connection():
                        self._reconnect_attempts = 0
                        self._is_unavailable = False
                        self._total_reconnects += 1
                        logger.info(
                            "Database reconnection successful",
                            extra={"operation": "reconnect", "attempt": attempt},
                        )
                        return True
                    logger.warning(
                        f"Database reconnection attempt {attempt} failed: "
                        f"connection test failed",
                        extra={
                            "operation": "reconnect",
                            "attempt": attempt,
                            "max_attempts": self.config.max_reconnect_attempts,
                        },
                    )
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning(
                        f"Database reconnection attempt {attempt} failed: "
                        f"{sanitize_error_message(e)}",
                        extra={
                            "operation": "reconnect",
                            "attempt": attempt,
                            "max_attempts": self.config.max_reconnect_attempts,
                            "delay_seconds": delay,
                        },
                    )

            if self._is_shutting_down:
                return False
            self._is_unavailable = True
            logger.error(
                "Maximum reconnection attempts reached, database unavailable",
                extra={"operation": "reconnect_failed"},
            )
            return False

    def _schedule_reconnect(self) -> None:
        if self._is_shutting_down:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        if self._reconnect_attempts >= self.config.max_reconnect_attempts:
            return
        self._reconnect_task = asyncio.create_task(
            self.reconnect(), name="database-reconnect"
        )

    def start_health_monitoring(self) -> asyncio.Task[None]:
        """Start (or return) the periodic health monitoring task."""
        if self._health_task is None or self._health_task.done():
            self._health_task = asyncio.create_task(
                self._health_monitor_loop(), name="database-health-monitor"
            )
        return self._health_task

    async def stop_health_monitoring(self) -> None:
        task, self._health_task = self._health_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _health_monitor_loop(self) -> None:
        interval = self.config.health_check_interval_seconds
        while not self._is_shutting_down:
            await self._sleep(interval)
            try:
                healthy = await self.test_connection()
                self._last_health_check = datetime.now(UTC)
                if (
                    not healthy
                    and self._reconnect_attempts < self.config.max_reconnect_attempts
                ):
                    logger.warning(
                        "Health check failed, attempting reconnection",
                        extra={
                            "operation": "health_check",
                            "reconnect_attempts": self._reconnect_attempts,
                        },
                    )
                    await self.reconnect()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    f"Health check error: {sanitize_error_message(e)}",
                    extra={"operation": "health_check"},
                )

    async def reset_circuit_breaker(self) -> None:
        """Operator override: close the breaker and forget the failure streak."""
        await self.circuit_breaker.reset()
        self.health.reset()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def is_unavailable(self) -> bool:
        return self._is_unavailable

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def reconnect_task(self) -> Optional[asyncio.Task[bool]]:
        """Background reconnect scheduled by a failed operation, if any."""
        return self._reconnect_task

    def _metrics(self, detailed: bool = False) -> ModelConnectionMetrics:
        total = self._total_queries
        success_rate = (self._successful_queries / total * 100) if total else 100.0
        error_rate = (self._failed_queries / total * 100) if total else 0.0
        uptime_hours = None
        queries_per_second = None
        if detailed:
            uptime_seconds = (datetime.now(UTC) - self._started_at).total_seconds()
            uptime_hours = uptime_seconds / 3600
            queries_per_second = total / uptime_seconds if uptime_seconds > 0 else 0.0
        return ModelConnectionMetrics(
            total_queries=total,
            successful_queries=self._successful_queries,
            failed_queries=self._failed_queries,
            retried_attempts=self._retried_attempts,
            average_response_time_ms=self._average_response_time_ms,
            reconnect_attempts=self._reconnect_attempts,
            total_reconnects=self._total_reconnects,
            success_rate=success_rate,
            error_rate=error_rate,
            uptime_hours=uptime_hours,
            queries_per_second=queries_per_second,
        )

    def get_detailed_metrics(self) -> ModelConnectionMetrics:
        """Lifetime counters with success/error rates, uptime and throughput."""
        return self._metrics(detailed=True)

    def get_query_history(self, limit: int = 100) -> list[ModelQueryRecord]:
        """Most recent query records, oldest first."""
        if limit <= 0:
            return []
        return list(self._query_history)[-limit:]

    def get_status(self) -> ModelConnectionStatus:
        pool = self.pool
        monitoring = self._health_task is not None and not self._health_task.done()
        last_check = self._last_health_check or self.health.last_check
        next_check = (
            last_check + timedelta(seconds=self.config.health_check_interval_seconds)
            if monitoring
            else None
        )
        return ModelConnectionStatus(
            is_initialized=self.is_initialized,
            is_healthy=(
                pool is not None
                and self.health.is_healthy
                and self._reconnect_attempts == 0
                and not self._is_unavailable
            ),
            is_unavailable=self._is_unavailable,
            response_time_ms=self.health.response_time_ms,
            error_count=self.health.error_count,
            consecutive_failures=self.health.consecutive_failures,
            metrics=self._metrics(),
            circuit_breaker=self.circuit_breaker.snapshot(),
            active_transactions=len(self.active_transactions),
            pool_size=pool.get_size() if pool is not None else None,
            pool_idle=pool.get_idle_size() if pool is not None else None,
            last_health_check=last_check,
            next_health_check=next_check,
        )


def _correlation_from(ctx: dict[str, object]) -> Optional[UUID]:
    value = ctx.pop("correlation_id", None)
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            return None
    return None


__all__: list[str] = [
    "DatabaseConnectionManager",
    "PoolFactory",
    "create_asyncpg_pool",
]
