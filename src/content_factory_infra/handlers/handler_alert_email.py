# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Email relay alert channel.

Alerts are handed to an HTTP email relay (``MONITORING_EMAIL_ENDPOINT``)
which owns recipients and SMTP delivery. The body extends the webhook
payload with a ready-made ``subject`` and plain ``text``.
"""

from __future__ import annotations

import logging
import time
from uuid import uuid4

import httpx

from content_factory_infra.handlers.handler_alert_webhook import build_alert_payload
from content_factory_infra.models import ModelAlert, ModelAlertDeliveryResult
from content_factory_infra.utils import mask_url, sanitize_error_message

logger = logging.getLogger(__name__)


class HandlerAlertEmail:
    """Deliver alerts through an HTTP email relay. Never raises on delivery."""

    channel = "email"

    def __init__(
        self,
        endpoint: str,
        service_name: str,
        environment: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._endpoint = endpoint
        self._service_name = service_name
        self._environment = environment
        self._http_client = http_client
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"<{type(self).__name__} endpoint={mask_url(self._endpoint)!r}>"

    def build_body(self, alert: ModelAlert) -> dict[str, object]:
        body = build_alert_payload(alert, self._service_name, self._environment)
        body["subject"] = (
            f"[{alert.type.value.upper()}] {alert.title} "
            f"({self._service_name}/{self._environment})"
        )
        body["text"] = alert.message
        return body

    async def handle(self, alert: ModelAlert) -> ModelAlertDeliveryResult:
        start_time = time.perf_counter()
        correlation_id = uuid4()

        client_created = False
        client = self._http_client
        if client is None:
            client = httpx.AsyncClient()
            client_created = True

        status_code: int | None = None
        error: str | None = None
        try:
            response = await client.post(
                self._endpoint, json=self.build_body(alert), timeout=self._timeout
            )
            status_code = response.status_code
            if not response.is_success:
                error = f"HTTP {response.status_code}"
        except httpx.HTTPError as e:
            error = sanitize_error_message(e)
        finally:
            if client_created:
                await client.aclose()

        duration_ms = (time.perf_counter() - start_time) * 1000
        if error is None:
            logger.info(
                "Email alert handed to relay",
                extra={
                    "correlation_id": str(correlation_id),
                    "status_code": status_code,
                },
            )
        else:
            logger.warning(
                f"Email alert delivery failed: {error}",
                extra={
                    "correlation_id": str(correlation_id),
                    "status_code": status_code,
                },
            )
        return ModelAlertDeliveryResult(
            channel=self.channel,
            success=error is None,
            status_code=status_code,
            duration_ms=duration_ms,
            error=error,
            correlation_id=correlation_id,
        )


__all__: list[str] = ["HandlerAlertEmail"]
