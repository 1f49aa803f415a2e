# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for database error classification.

Covers typed matches on asyncpg and builtin exceptions, keyword fallback on
the error text, rule ordering and the UNKNOWN default.
"""

from __future__ import annotations

import pytest
from asyncpg import exceptions as pg_exc

from content_factory_infra.enums import EnumDbErrorKind
from content_factory_infra.utils import (
    DEFAULT_CLASSIFICATION_RULES,
    ErrorClassificationRule,
    classify_error,
)


class TestTypedClassification:
    """Exception classes decide before any keyword is looked at."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (pg_exc.ConnectionDoesNotExistError("gone"), EnumDbErrorKind.CONNECTION_ERROR),
            (ConnectionRefusedError("refused"), EnumDbErrorKind.CONNECTION_ERROR),
            (TimeoutError(), EnumDbErrorKind.TIMEOUT_ERROR),
            (pg_exc.QueryCanceledError("canceling statement"), EnumDbErrorKind.TIMEOUT_ERROR),
            (pg_exc.DeadlockDetectedError("boom"), EnumDbErrorKind.DEADLOCK_ERROR),
            (pg_exc.UniqueViolationError("dup"), EnumDbErrorKind.CONSTRAINT_VIOLATION),
            (pg_exc.PostgresSyntaxError("bad"), EnumDbErrorKind.QUERY_ERROR),
            (pg_exc.UndefinedTableError("missing"), EnumDbErrorKind.QUERY_ERROR),
            (pg_exc.InsufficientPrivilegeError("nope"), EnumDbErrorKind.PERMISSION_ERROR),
            (pg_exc.DiskFullError("full"), EnumDbErrorKind.STORAGE_ERROR),
        ],
    )
    def test_typed_errors(self, error: BaseException, expected: EnumDbErrorKind) -> None:
        assert classify_error(error).kind is expected

    def test_type_beats_keyword_of_earlier_rule(self) -> None:
        """A deadlock whose text mentions 'connection' is still a deadlock."""
        error = pg_exc.DeadlockDetectedError("deadlock on connection 42")
        assert classify_error(error).kind is EnumDbErrorKind.DEADLOCK_ERROR


class TestKeywordClassification:
    """Messages of untyped errors are matched case-insensitively."""

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Could not CONNECT to server", EnumDbErrorKind.CONNECTION_ERROR),
            ("statement timeout", EnumDbErrorKind.TIMEOUT_ERROR),
            ("Deadlock detected", EnumDbErrorKind.DEADLOCK_ERROR),
            ("violates foreign key", EnumDbErrorKind.CONSTRAINT_VIOLATION),
            ('column "nme" does not exist', EnumDbErrorKind.QUERY_ERROR),
            ("permission denied for table posts", EnumDbErrorKind.PERMISSION_ERROR),
            ("no space left on device", EnumDbErrorKind.STORAGE_ERROR),
        ],
    )
    def test_keywords(self, message: str, expected: EnumDbErrorKind) -> None:
        assert classify_error(RuntimeError(message)).kind is expected

    def test_first_matching_rule_wins(self) -> None:
        """'connection' precedes 'timeout' in the table."""
        result = classify_error(RuntimeError("connection timeout"))
        assert result.kind is EnumDbErrorKind.CONNECTION_ERROR

    def test_unmatched_is_unknown_and_not_retryable(self) -> None:
        result = classify_error(ValueError("something odd"))
        assert result.kind is EnumDbErrorKind.UNKNOWN
        assert result.is_retryable is False
        assert result.suggested_action == "Contact support"

    def test_empty_message_is_unknown(self) -> None:
        assert classify_error(RuntimeError("")).kind is EnumDbErrorKind.UNKNOWN


class TestClassificationVerdict:
    @pytest.mark.parametrize(
        "kind",
        [
            EnumDbErrorKind.CONNECTION_ERROR,
            EnumDbErrorKind.TIMEOUT_ERROR,
            EnumDbErrorKind.DEADLOCK_ERROR,
        ],
    )
    def test_transient_kinds_are_retryable(self, kind: EnumDbErrorKind) -> None:
        assert kind.is_retryable is True

    def test_verdict_carries_suggested_action(self) -> None:
        result = classify_error(RuntimeError("deadlock detected"))
        assert result.is_retryable is True
        assert result.suggested_action == "Retry transaction with different ordering"

    def test_custom_rule_table(self) -> None:
        rules = (
            ErrorClassificationRule(
                kind=EnumDbErrorKind.STORAGE_ERROR, keywords=("quota",)
            ),
            *DEFAULT_CLASSIFICATION_RULES,
        )
        assert classify_error(RuntimeError("quota exceeded"), rules).kind is (
            EnumDbErrorKind.STORAGE_ERROR
        )

    def test_client_errors_do_not_trigger_reconnect(self) -> None:
        assert EnumDbErrorKind.CONSTRAINT_VIOLATION.is_client_error is True
        assert EnumDbErrorKind.CONSTRAINT_VIOLATION.triggers_reconnect is False
        assert EnumDbErrorKind.DEADLOCK_ERROR.triggers_reconnect is False
        assert EnumDbErrorKind.TIMEOUT_ERROR.triggers_reconnect is True
