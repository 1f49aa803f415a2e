# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for environment variable parsing helpers."""

from __future__ import annotations

import pytest

from content_factory_infra.errors import ProtocolConfigurationError
from content_factory_infra.utils import detect_environment, parse_env_float, parse_env_int


class TestParseEnvInt:
    def test_unset_returns_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CF_TEST_INT", raising=False)
        assert parse_env_int("CF_TEST_INT", 7) == 7

    def test_blank_returns_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_INT", "  ")
        assert parse_env_int("CF_TEST_INT", 7) == 7

    def test_parses_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_INT", " 42 ")
        assert parse_env_int("CF_TEST_INT", 7) == 42

    def test_malformed_value_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_INT", "forty")
        with pytest.raises(ProtocolConfigurationError) as exc_info:
            parse_env_int("CF_TEST_INT", 7)
        assert exc_info.value.context["variable"] == "CF_TEST_INT"
        assert "must be an integer" in exc_info.value.message

    def test_bounds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_INT", "0")
        with pytest.raises(ProtocolConfigurationError, match=">= 1"):
            parse_env_int("CF_TEST_INT", 7, min_value=1)
        monkeypatch.setenv("CF_TEST_INT", "70000")
        with pytest.raises(ProtocolConfigurationError, match="<= 65535"):
            parse_env_int("CF_TEST_INT", 7, max_value=65535)


class TestParseEnvFloat:
    def test_parses_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_FLOAT", "0.25")
        assert parse_env_float("CF_TEST_FLOAT", 1.0) == 0.25

    def test_malformed_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CF_TEST_FLOAT", "abc")
        with pytest.raises(ProtocolConfigurationError, match="must be a number"):
            parse_env_float("CF_TEST_FLOAT", 1.0)


class TestDetectEnvironment:
    @pytest.fixture(autouse=True)
    def _clear(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ENVIRONMENT", "ENV", "DEPLOYMENT_ENV", "NODE_ENV"):
            monkeypatch.delenv(name, raising=False)

    def test_default_is_development(self) -> None:
        assert detect_environment() == "development"

    def test_first_set_variable_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NODE_ENV", "staging")
        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert detect_environment() == "production"
