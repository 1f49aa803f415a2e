# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Database error classification.

Maps any failure surfaced by the store driver to an ``EnumDbErrorKind``
through an ordered rule table. Rules are tried in order and the first match
wins. Within a rule, typed matches (asyncpg exception classes, builtin
connection and timeout errors) are authoritative and are checked for every
rule before any keyword match is attempted; keyword matching against the
lowercased error text is the fallback for drivers and wrappers that only
surface a message.

The classifier is a pure function: it never logs and never raises. Callers
decide what to do with the verdict.

Example:
    >>> classify_error(RuntimeError("could not connect to server")).kind
    <EnumDbErrorKind.CONNECTION_ERROR: 'connection_error'>
    >>> classify_error(ValueError("duplicate key violates unique constraint")).is_retryable
    False
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from asyncpg import exceptions as pg_exc

from content_factory_infra.enums import EnumDbErrorKind
from content_factory_infra.models import ModelErrorClassification


@dataclass(frozen=True)
class ErrorClassificationRule:
    """One row of the classification table.

    Attributes:
        kind: Kind assigned when the rule matches.
        keywords: Lowercase substrings searched in ``str(error)``.
        exception_types: Exception classes matched with ``isinstance``.
    """

    kind: EnumDbErrorKind
    keywords: tuple[str, ...] = ()
    exception_types: tuple[type[BaseException], ...] = ()

    def matches_type(self, error: BaseException) -> bool:
        return bool(self.exception_types) and isinstance(error, self.exception_types)

    def matches_text(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


DEFAULT_CLASSIFICATION_RULES: tuple[ErrorClassificationRule, ...] = (
    ErrorClassificationRule(
        kind=EnumDbErrorKind.CONNECTION_ERROR,
        keywords=("connection", "connect"),
        exception_types=(
            pg_exc.PostgresConnectionError,
            pg_exc.ConnectionDoesNotExistError,
            ConnectionError,
        ),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.TIMEOUT_ERROR,
        keywords=("timeout",),
        exception_types=(pg_exc.QueryCanceledError, TimeoutError),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.DEADLOCK_ERROR,
        keywords=("deadlock",),
        exception_types=(pg_exc.DeadlockDetectedError,),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.CONSTRAINT_VIOLATION,
        keywords=("constraint", "foreign key"),
        exception_types=(pg_exc.IntegrityConstraintViolationError,),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.QUERY_ERROR,
        keywords=("syntax", "column"),
        exception_types=(
            pg_exc.PostgresSyntaxError,
            pg_exc.UndefinedColumnError,
            pg_exc.UndefinedTableError,
        ),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.PERMISSION_ERROR,
        keywords=("permission", "access"),
        exception_types=(pg_exc.InsufficientPrivilegeError,),
    ),
    ErrorClassificationRule(
        kind=EnumDbErrorKind.STORAGE_ERROR,
        keywords=("disk", "space"),
        exception_types=(pg_exc.InsufficientResourcesError,),
    ),
)


def classify_error(
    error: BaseException,
    rules: Sequence[ErrorClassificationRule] = DEFAULT_CLASSIFICATION_RULES,
) -> ModelErrorClassification:
    """Classify a failure.

    Args:
        error: Exception raised by the driver or by the operation.
        rules: Ordered rule table. Defaults to ``DEFAULT_CLASSIFICATION_RULES``.

    Returns:
        Classification with kind, retryability and suggested action.
        ``UNKNOWN`` (not retryable) when no rule matches.
    """
    for rule in rules:
        if rule.matches_type(error):
            return ModelErrorClassification.for_kind(rule.kind)

    text = str(error).lower()
    for rule in rules:
        if rule.matches_text(text):
            return ModelErrorClassification.for_kind(rule.kind)

    return ModelErrorClassification.for_kind(EnumDbErrorKind.UNKNOWN)


__all__: list[str] = [
    "DEFAULT_CLASSIFICATION_RULES",
    "ErrorClassificationRule",
    "classify_error",
]
