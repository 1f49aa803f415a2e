# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Single step of a managed transaction."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Optional

__all__: list[str] = ["ModelTransactionOperation", "RollbackHandler", "TransactionApply"]

TransactionApply = Callable[[Any], Awaitable[Any]]
RollbackHandler = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class ModelTransactionOperation:
    """An operation applied inside ``execute_transaction``.

    Attributes:
        apply: Coroutine function receiving the transaction's connection.
        rollback: Compensating action for side effects outside the database
            (cache entries, uploaded files). Runs only when a later step fails.
        label: Name recorded in the transaction context once applied.
    """

    apply: TransactionApply
    rollback: Optional[RollbackHandler] = None
    label: Optional[str] = None

    @property
    def name(self) -> str:
        if self.label:
            return self.label
        return getattr(self.apply, "__name__", "operation")
