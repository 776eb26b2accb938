"""
Registry mapping event types to webhook handlers.
"""

import logging
from typing import Iterable, Optional

from core.domain.webhook import WebhookEvent

from .base import BaseWebhookHandler

logger = logging.getLogger(__name__)


class WebhookRegistry:
    """
    Holds at most one handler per event type and dispatches events to it.

    Registering a second handler for the same type replaces the first and
    logs a warning.
    """

    def __init__(self):
        self._handlers: dict[str, BaseWebhookHandler] = {}

    def register(self, handler: BaseWebhookHandler) -> None:
        event_type = handler.event_type
        existing = self._handlers.get(event_type)
        if existing is not None:
            logger.warning(
                "Overwriting existing handler for event type: %s (%s -> %s)",
                event_type,
                existing.name,
                handler.name,
                extra={"type": "webhook_registry", "event_type": event_type},
            )

        self._handlers[event_type] = handler
        logger.debug(
            "Registered handler for %s",
            event_type,
            extra={"type": "webhook_registry", "event_type": event_type, "handler": handler.name},
        )

    def register_all(self, handlers: Iterable[BaseWebhookHandler]) -> None:
        for handler in handlers:
            self.register(handler)

    def get(self, event_type: str) -> Optional[BaseWebhookHandler]:
        return self._handlers.get(event_type)

    def has(self, event_type: str) -> bool:
        return event_type in self._handlers

    def get_registered_event_types(self) -> list[str]:
        """Registered event types in registration order."""
        return list(self._handlers)

    async def dispatch(self, event: WebhookEvent) -> bool:
        """
        Route ``event`` to its handler.

        Returns:
            True if a handler ran, False if no handler is registered for the
            event type. Handler exceptions propagate.
        """
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.debug(
                "No handler registered for event type: %s",
                event.type,
                extra={"type": "webhook_registry", "event_id": event.id, "event_type": event.type},
            )
            return False

        await handler.execute(event)
        return True

    def clear(self) -> None:
        self._handlers.clear()

    def count(self) -> int:
        return len(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
