# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Handlers module for content_factory_infra.

This module provides the remote alert channels used by the monitoring
service. Each handler posts one alert to an external endpoint and reports
the outcome as a ``ModelAlertDeliveryResult``; delivery failures are never
raised to the caller.

Available Handlers:
- HandlerAlertWebhook: JSON webhook delivery over aiohttp with bounded retry
- HandlerAlertEmail: Email relay delivery over httpx

Helpers:
- build_alert_payload: Wire payload shared by both channels
"""

from content_factory_infra.handlers.handler_alert_email import HandlerAlertEmail
from content_factory_infra.handlers.handler_alert_webhook import (
    HandlerAlertWebhook,
    build_alert_payload,
)

__all__: list[str] = [
    "HandlerAlertEmail",
    "HandlerAlertWebhook",
    "build_alert_payload",
]
