# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Command line entry points for content_factory_infra."""
