"""
payment_intent.succeeded handler.
"""

import logging

from core.domain.webhook import StripeEventType, WebhookEvent

from ..base import BaseWebhookHandler

logger = logging.getLogger(__name__)


class PaymentSucceededHandler(BaseWebhookHandler):
    """
    Logs successful payment intents.

    Fulfillment happens on checkout.session.completed; the two events can
    arrive in either order, so nothing is mutated here.
    """

    event_type = StripeEventType.PAYMENT_INTENT_SUCCEEDED

    async def handle(self, event: WebhookEvent) -> None:
        intent = event.data
        logger.info(
            "Payment intent succeeded: %s",
            intent.get("id"),
            extra={
                "type": "payment",
                "event_id": event.id,
                "amount": intent.get("amount"),
                "currency": intent.get("currency"),
                "metadata": {
                    "payment_intent_id": intent.get("id"),
                    "customer_id": intent.get("customer"),
                    **dict(intent.get("metadata") or {}),
                },
            },
        )
