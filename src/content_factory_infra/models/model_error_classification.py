# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Classifier verdict for a failure."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from content_factory_infra.enums import EnumDbErrorKind

__all__: list[str] = ["ModelErrorClassification"]


class ModelErrorClassification(BaseModel):
    """Kind, retryability and suggested action for one failure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: EnumDbErrorKind
    is_retryable: bool
    suggested_action: str

    @classmethod
    def for_kind(cls, kind: EnumDbErrorKind) -> ModelErrorClassification:
        return cls(
            kind=kind,
            is_retryable=kind.is_retryable,
            suggested_action=kind.suggested_action,
        )
