"""
Stripe webhook endpoint.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from adapters.payments.stripe_adapter import StripeWebhookError
from api.dependencies import get_app_settings, get_payment_provider, get_webhook_registry
from api.middleware.rate_limit import get_rate_limit, limiter
from core.interfaces.services import PaymentProvider
from infrastructure.config.settings import Settings
from services.webhooks import WebhookRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/stripe")
@limiter.limit(get_rate_limit("webhook"))
async def stripe_webhook(
    request: Request,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
    settings: Settings = Depends(get_app_settings),
):
    """
    Receive a Stripe event, verify it and dispatch it to its handler.

    Responds 200 once the event is processed (or deliberately ignored) so
    Stripe stops retrying; a 500 makes Stripe redeliver it later.
    """
    if not settings.stripe_configured:
        logger.error("Stripe webhook rejected: STRIPE_SECRET_KEY / STRIPE_WEBHOOK_SECRET not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stripe webhooks not configured",
        )

    if not stripe_signature:
        logger.warning("Stripe webhook received without signature")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe-Signature header",
        )

    registry: WebhookRegistry = get_webhook_registry(request)
    payments: PaymentProvider = get_payment_provider(request)

    body = await request.body()
    try:
        event = payments.construct_webhook_event(body, stripe_signature)
    except StripeWebhookError as e:
        logger.warning("Stripe webhook verification failed: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(
        "Stripe webhook received: %s",
        event.type,
        extra={"event_id": event.id, "event_type": event.type},
    )

    try:
        handled = await registry.dispatch(event)
    except Exception as e:
        logger.error(
            "Stripe webhook processing failed for %s: %s",
            event.id,
            e,
            extra={"event_id": event.id, "event_type": event.type},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook processing failed",
        )

    return {"received": True, "handled": handled}
