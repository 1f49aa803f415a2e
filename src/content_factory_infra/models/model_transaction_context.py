# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Ephemeral bookkeeping for one running transaction."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from content_factory_infra.models.model_transaction_operation import RollbackHandler

__all__: list[str] = ["ModelTransactionContext", "generate_transaction_id"]


def generate_transaction_id() -> str:
    """Return an id of the form ``tx_<epoch_ms>_<hex>``."""
    return f"tx_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


@dataclass
class ModelTransactionContext:
    """Created at transaction start, discarded on commit or rollback.

    Owned by the executing ``execute_transaction`` call; the manager only
    indexes it by id so status endpoints can report in-flight transactions.
    """

    id: str = field(default_factory=generate_transaction_id)
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    operations: list[str] = field(default_factory=list)
    rollback_handlers: list[RollbackHandler] = field(default_factory=list)
