"""Chat-webhook notifier and fire-and-forget dispatch."""

import asyncio
import logging
from typing import Protocol

import httpx

from ..core.config import Settings, settings
from ..core.exceptions import NotificationError
from ..core.observability import get_logger, metrics_collector
from .messages import NotificationPayload

logger = logging.getLogger(__name__)
delivery_log = get_logger("aerodemo.notifications")


class Notifier(Protocol):
    """Anything that can deliver a workflow notification."""

    async def send(self, payload: NotificationPayload) -> bool:
        ...


class DiscordWebhookNotifier:
    """
    Posts workflow events to a Discord-compatible webhook.

    ``send`` never raises: transport errors, error responses and a missing
    webhook URL are logged and reported as ``False``.
    """

    def __init__(
        self,
        webhook_url: str | None,
        timeout: float = 10.0,
        username: str | None = "EDA",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.username = username
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings) -> "DiscordWebhookNotifier":
        return cls(
            webhook_url=config.discord_webhook_url,
            timeout=config.notification_timeout_seconds,
        )

    async def send(self, payload: NotificationPayload) -> bool:
        if not self.webhook_url:
            logger.debug(
                "Webhook URL not configured - notification skipped",
                extra={"title": payload.title, "record_id": payload.record_id}
            )
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload.to_webhook_json(self.username),
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.warning(
                "Webhook rejected notification",
                extra={
                    "title": payload.title,
                    "record_id": payload.record_id,
                    "status_code": e.response.status_code,
                }
            )
            return False

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "Webhook request failed",
                extra={
                    "title": payload.title,
                    "record_id": payload.record_id,
                    "error": str(e),
                }
            )
            return False

        return True


class NotificationDispatcher:
    """
    Hands payloads to a notifier without letting failures reach the caller.

    In background mode each delivery runs as its own task and the caller
    continues immediately; ``drain`` waits for deliveries still in flight.
    Nothing is retried or queued for redelivery.
    """

    def __init__(self, notifier: Notifier, background: bool = True):
        self.notifier = notifier
        self.background = background
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def dispatch(self, payload: NotificationPayload) -> None:
        if not self.background:
            await self._deliver(payload)
            return

        task = asyncio.create_task(self._deliver(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, payload: NotificationPayload) -> bool:
        log = delivery_log.with_context(
            title=payload.title,
            record_type=payload.record_type.value,
            record_id=payload.record_id,
        )

        try:
            delivered = await self.notifier.send(payload)
        except Exception as e:
            error = NotificationError(payload.title, payload.record_type.value, payload.record_id, repr(e))
            log.error("notification_error", error=str(error))
            metrics_collector.record_notification("error")
            return False

        if not delivered:
            error = NotificationError(
                payload.title, payload.record_type.value, payload.record_id, "delivery not confirmed"
            )
            log.warning("notification_failed", error=str(error))
            metrics_collector.record_notification("failed")
            return False

        log.info("notification_sent")
        metrics_collector.record_notification("sent")
        return True


# Global dispatcher used by the HTTP layer
notification_dispatcher = NotificationDispatcher(
    DiscordWebhookNotifier.from_settings(settings),
    background=settings.notification_background,
)
