# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Webhook alert channel.

POSTs alerts raised by the monitoring service as JSON to
``MONITORING_WEBHOOK_URL``::

    {
        "alert": {"id", "type", "title", "message", "timestamp", "metadata"},
        "service": "<service name>",
        "environment": "<environment>"
    }

Server errors (5xx), timeouts and connection errors are retried with a
fixed backoff schedule; client errors (4xx) fail fast. The handler never
raises during delivery: outcomes are returned as
``ModelAlertDeliveryResult`` so a broken channel can never take the
monitoring loop down with it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from uuid import UUID, uuid4

import aiohttp

from content_factory_infra.models import ModelAlert, ModelAlertDeliveryResult
from content_factory_infra.utils import mask_url, sanitize_error_message

logger = logging.getLogger(__name__)

_DEFAULT_MAX_RETRIES: int = 2
_DEFAULT_RETRY_BACKOFF_SECONDS: tuple[float, ...] = (1.0, 2.0)
_DEFAULT_TIMEOUT_SECONDS: float = 10.0

_ALERT_PAYLOAD_FIELDS = {"id", "type", "title", "message", "timestamp", "metadata"}


def build_alert_payload(
    alert: ModelAlert, service: str, environment: str
) -> dict[str, object]:
    """JSON body shared by the remote alert channels."""
    return {
        "alert": alert.model_dump(mode="json", include=_ALERT_PAYLOAD_FIELDS),
        "service": service,
        "environment": environment,
    }


class HandlerAlertWebhook:
    """Deliver alerts to a generic JSON webhook.

    Args:
        webhook_url: Destination URL.
        service_name: Value of the payload's ``service`` field.
        environment: Value of the payload's ``environment`` field.
        http_session: Optional shared aiohttp session. A session is created
            per delivery when omitted.
        max_retries: Retries after the first attempt.
        retry_backoff: Backoff delays in seconds, indexed by retry.
        timeout: Total request timeout in seconds.
    """

    channel = "webhook"

    def __init__(
        self,
        webhook_url: str,
        service_name: str,
        environment: str,
        http_session: aiohttp.ClientSession | None = None,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        retry_backoff: tuple[float, ...] = _DEFAULT_RETRY_BACKOFF_SECONDS,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._webhook_url = webhook_url
        self._service_name = service_name
        self._environment = environment
        self._http_session = http_session
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"<{type(self).__name__} url={mask_url(self._webhook_url)!r}>"

    async def handle(self, alert: ModelAlert) -> ModelAlertDeliveryResult:
        """Send ``alert``. Never raises for delivery failures."""
        start_time = time.perf_counter()
        correlation_id = uuid4()
        payload = build_alert_payload(alert, self._service_name, self._environment)

        session_created = False
        session = self._http_session
        if session is None:
            session = aiohttp.ClientSession()
            session_created = True

        try:
            return await self._send_with_retry(
                session, payload, correlation_id, start_time
            )
        finally:
            if session_created:
                await session.close()

    async def _send_with_retry(
        self,
        session: aiohttp.ClientSession,
        payload: dict[str, object],
        correlation_id: UUID,
        start_time: float,
    ) -> ModelAlertDeliveryResult:
        last_error: str | None = None
        last_status: int | None = None

        for attempt in range(self._max_retries + 1):
            try:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self._timeout),
                ) as response:
                    last_status = response.status
                    if 200 <= response.status < 300:
                        logger.info(
                            "Webhook alert delivered",
                            extra={
                                "correlation_id": str(correlation_id),
                                "status_code": response.status,
                                "attempt": attempt + 1,
                            },
                        )
                        return self._result(
                            True, start_time, correlation_id, status_code=response.status
                        )

                    body = (await response.text())[:100]
                    last_error = f"HTTP {response.status}: {body}"
                    if response.status < 500:
                        # Client errors are not retried
                        logger.warning(
                            "Webhook rejected alert",
                            extra={
                                "correlation_id": str(correlation_id),
                                "status_code": response.status,
                            },
                        )
                        return self._result(
                            False,
                            start_time,
                            correlation_id,
                            status_code=response.status,
                            error=last_error,
                        )
                    logger.warning(
                        "Webhook server error",
                        extra={
                            "correlation_id": str(correlation_id),
                            "status_code": response.status,
                            "attempt": attempt + 1,
                        },
                    )

            except TimeoutError:
                last_error = "Request timeout"
                logger.warning(
                    "Webhook alert timeout",
                    extra={
                        "correlation_id": str(correlation_id),
                        "timeout_seconds": self._timeout,
                        "attempt": attempt + 1,
                    },
                )
            except aiohttp.ClientError as e:
                last_error = sanitize_error_message(e)
                logger.warning(
                    "Webhook alert client error",
                    extra={
                        "correlation_id": str(correlation_id),
                        "attempt": attempt + 1,
                        "error_type": type(e).__name__,
                    },
                )

            if attempt < self._max_retries and self._retry_backoff:
                backoff_index = min(attempt, len(self._retry_backoff) - 1)
                await asyncio.sleep(self._retry_backoff[backoff_index])

        logger.error(
            "Webhook alert delivery failed after retries",
            extra={
                "correlation_id": str(correlation_id),
                "attempts": self._max_retries + 1,
                "error": last_error,
            },
        )
        return self._result(
            False,
            start_time,
            correlation_id,
            status_code=last_status,
            error=last_error,
        )

    def _result(
        self,
        success: bool,
        start_time: float,
        correlation_id: UUID,
        *,
        status_code: int | None = None,
        error: str | None = None,
    ) -> ModelAlertDeliveryResult:
        return ModelAlertDeliveryResult(
            channel=self.channel,
            success=success,
            status_code=status_code,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            error=error,
            correlation_id=correlation_id,
        )


__all__: list[str] = ["HandlerAlertWebhook", "build_alert_payload"]
