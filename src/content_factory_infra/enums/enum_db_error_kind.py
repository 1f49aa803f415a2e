# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Database Error Kind Enumeration.

Low-level cause taxonomy assigned by the error classifier to failures
surfaced by the store driver. Each kind carries its retry semantics and the
operator-facing suggested action, so callers never need a second lookup
table.

Usage:
    >>> from content_factory_infra.enums import EnumDbErrorKind
    >>> kind = EnumDbErrorKind.DEADLOCK_ERROR
    >>> kind.is_retryable
    True
    >>> kind.suggested_action
    'Retry transaction with different ordering'
"""

from enum import Enum


class EnumDbErrorKind(str, Enum):
    """Classified cause of a database failure.

    Retryable (transient):
        CONNECTION_ERROR: Network or pool level connectivity failure.
        TIMEOUT_ERROR: Statement or connect timeout.
        DEADLOCK_ERROR: Transaction aborted by deadlock detection.

    Non-retryable (permanent until something changes):
        CONSTRAINT_VIOLATION: Unique/foreign key/check constraint failed.
        QUERY_ERROR: Syntax error or unknown column/table.
        PERMISSION_ERROR: Missing privileges.
        STORAGE_ERROR: Disk full or out of resources.
        UNKNOWN: Anything the rule table does not recognise.
    """

    CONNECTION_ERROR = "connection_error"
    TIMEOUT_ERROR = "timeout_error"
    DEADLOCK_ERROR = "deadlock_error"
    CONSTRAINT_VIOLATION = "constraint_violation"
    QUERY_ERROR = "query_error"
    PERMISSION_ERROR = "permission_error"
    STORAGE_ERROR = "storage_error"
    UNKNOWN = "unknown"

    @property
    def is_retryable(self) -> bool:
        """Whether an operation failing with this kind may succeed on retry."""
        return self in {
            EnumDbErrorKind.CONNECTION_ERROR,
            EnumDbErrorKind.TIMEOUT_ERROR,
            EnumDbErrorKind.DEADLOCK_ERROR,
        }

    @property
    def triggers_reconnect(self) -> bool:
        """Whether this kind indicates the pool itself may be broken.

        Deadlocks are retryable but prove the server is reachable, so they
        do not trigger a reconnect.
        """
        return self in {
            EnumDbErrorKind.CONNECTION_ERROR,
            EnumDbErrorKind.TIMEOUT_ERROR,
        }

    @property
    def is_client_error(self) -> bool:
        """Whether the failure was caused by the request rather than the store.

        Client errors prove the store answered, so they never count towards
        the circuit breaker.
        """
        return self in {
            EnumDbErrorKind.CONSTRAINT_VIOLATION,
            EnumDbErrorKind.QUERY_ERROR,
            EnumDbErrorKind.PERMISSION_ERROR,
        }

    @property
    def suggested_action(self) -> str:
        """Operator-facing remediation hint."""
        actions = {
            EnumDbErrorKind.CONNECTION_ERROR: "Check database connectivity",
            EnumDbErrorKind.TIMEOUT_ERROR: (
                "Retry operation or check query performance"
            ),
            EnumDbErrorKind.DEADLOCK_ERROR: "Retry transaction with different ordering",
            EnumDbErrorKind.CONSTRAINT_VIOLATION: (
                "Check data integrity and relationships"
            ),
            EnumDbErrorKind.QUERY_ERROR: "Check query syntax and schema",
            EnumDbErrorKind.PERMISSION_ERROR: "Check database permissions",
            EnumDbErrorKind.STORAGE_ERROR: "Check database storage capacity",
        }
        return actions.get(self, "Contact support")


__all__ = ["EnumDbErrorKind"]
