# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test doubles for asyncpg pools and for time.

The fakes stand in for asyncpg at the pool boundary so connection manager
tests run without a database:

- FakeConnection: ``fetchval``/``execute`` plus ``transaction()`` objects that
  record start/commit/rollback in ``events``
- FakePool: ``acquire()`` async context manager, ``close()``, size accessors
- FakePoolFactory: injectable ``pool_factory`` that can fail on demand
- ManualClock: monotonic clock advanced explicitly
- RecordingSleep: records requested delays and yields to the event loop
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from content_factory_infra.infrastructure.connection_config import ConnectionConfig


class FakeTransaction:
    def __init__(self, connection: FakeConnection) -> None:
        self._connection = connection

    async def start(self) -> None:
        self._connection.events.append("begin")

    async def commit(self) -> None:
        self._connection.events.append("commit")

    async def rollback(self) -> None:
        if self._connection.rollback_error is not None:
            raise self._connection.rollback_error
        self._connection.events.append("rollback")


class FakeConnection:
    """Connection whose ``fetchval`` outcomes are scripted per call."""

    def __init__(self) -> None:
        self.events: list[str] = []
        self.fetchval_results: list[Any] = []
        self.rollback_error: BaseException | None = None
        self.executed: list[str] = []
        # Raised by every fetchval while set, ahead of scripted results
        self.down_error: BaseException | None = None

    async def fetchval(self, query: str, *args: Any) -> Any:
        self.executed.append(query)
        if self.down_error is not None:
            raise self.down_error
        if self.fetchval_results:
            outcome = self.fetchval_results.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return 1

    async def execute(self, query: str, *args: Any) -> str:
        self.executed.append(query)
        self.events.append(query)
        return "OK"

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)


class FakePool:
    """Pool handing out a single shared ``FakeConnection``."""

    def __init__(self, connection: FakeConnection | None = None) -> None:
        self.connection = connection or FakeConnection()
        self.acquire_errors: list[BaseException] = []
        self.closed = False
        self.acquired = 0
        self.size = 5
        self.idle = 3

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[FakeConnection]:
        if self.acquire_errors:
            raise self.acquire_errors.pop(0)
        self.acquired += 1
        yield self.connection

    async def close(self) -> None:
        self.closed = True

    def get_size(self) -> int:
        return self.size

    def get_idle_size(self) -> int:
        return self.idle


class FakePoolFactory:
    """``pool_factory`` that returns ``pool`` or raises queued errors."""

    def __init__(self, pool: FakePool | None = None) -> None:
        self.pool = pool or FakePool()
        self.errors: list[BaseException] = []
        self.calls = 0

    async def __call__(self, config: ConnectionConfig) -> FakePool:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        self.pool.closed = False
        return self.pool


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Records requested delays (seconds) without waiting for them."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


__all__: list[str] = [
    "FakeConnection",
    "FakePool",
    "FakePoolFactory",
    "FakeTransaction",
    "ManualClock",
    "RecordingSleep",
]
