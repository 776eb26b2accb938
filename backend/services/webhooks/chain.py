"""
Composite handler for event types served by several guarded handlers.
"""

import logging
from typing import Sequence

from core.domain.webhook import WebhookEvent

from .base import BaseWebhookHandler

logger = logging.getLogger(__name__)


class GuardedHandlerChain(BaseWebhookHandler):
    """
    Occupies one registry slot and forwards each event to the first
    candidate whose ``can_handle`` accepts it, or to the fallback.

    Candidates must share the chain's event type.
    """

    def __init__(
        self,
        event_type: str,
        candidates: Sequence[BaseWebhookHandler],
        fallback: BaseWebhookHandler,
    ):
        for handler in (*candidates, fallback):
            if handler.event_type != event_type:
                raise ValueError(
                    f"{handler.name} handles {handler.event_type}, not {event_type}"
                )
        self.event_type = event_type
        self.candidates = tuple(candidates)
        self.fallback = fallback

    @property
    def name(self) -> str:
        return f"GuardedHandlerChain[{self.event_type}]"

    def select(self, event: WebhookEvent) -> BaseWebhookHandler:
        for candidate in self.candidates:
            if candidate.can_handle(event):
                return candidate
        return self.fallback

    async def handle(self, event: WebhookEvent) -> None:
        handler = self.select(event)
        logger.debug(
            "Routing %s to %s",
            event.id,
            handler.name,
            extra={"event_id": event.id, "event_type": event.type, "handler": handler.name},
        )
        await handler.execute(event)
