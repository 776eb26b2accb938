"""
Base class for payment webhook handlers.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from core.domain.webhook import WebhookEvent

from .errors import EventTypeMismatchError

logger = logging.getLogger(__name__)


class BaseWebhookHandler(ABC):
    """
    One handler per event type.

    Subclasses set ``event_type`` and implement ``handle``. Callers invoke
    ``execute``, which validates the event type, logs start/success/failure
    with timing and re-raises any failure unchanged so the delivery is
    retried by the provider.
    """

    event_type: ClassVar[str]

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def handle(self, event: WebhookEvent) -> None:
        """Process the event."""
        ...

    def can_handle(self, event: WebhookEvent) -> bool:
        """Whether this handler applies to ``event``; product handlers narrow this."""
        return event.type == self.event_type

    def validate_event_type(self, event: WebhookEvent) -> None:
        if event.type != self.event_type:
            raise EventTypeMismatchError(self.event_type, event.type)

    def _log_extra(self, event: WebhookEvent, **extra: Any) -> dict[str, Any]:
        return {
            "type": "stripe_webhook_handler",
            "event_id": event.id,
            "event_type": event.type,
            "handler": self.name,
            **extra,
        }

    async def execute(self, event: WebhookEvent) -> None:
        self.validate_event_type(event)
        logger.info("%s started", self.name, extra=self._log_extra(event))

        start = time.perf_counter()
        try:
            await self.handle(event)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.error(
                "%s failed: %s",
                self.name,
                e,
                exc_info=True,
                extra=self._log_extra(event, duration_ms=duration_ms, error=str(e)),
            )
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "%s completed successfully (%sms)",
            self.name,
            duration_ms,
            extra=self._log_extra(event, duration_ms=duration_ms),
        )
