# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared test helpers for content_factory_infra tests."""
