"""
Stripe webhook handler framework.

Usage::

    registry = create_stripe_webhook_registry(deps)
    handled = await registry.dispatch(event)
"""

from core.domain.webhook import StripeEventType

from .base import BaseWebhookHandler
from .chain import GuardedHandlerChain
from .dependencies import Repositories, WebhookDependencies
from .errors import (
    EventTypeMismatchError,
    MissingCustomerDataError,
    ProductNotFoundError,
    WebhookError,
)
from .handlers import (
    AIPremiumPurchaseHandler,
    CheckoutCompletedHandler,
    PaymentSucceededHandler,
    TextbookPurchaseHandler,
    ToolkitPurchaseHandler,
)
from .registry import WebhookRegistry


def create_stripe_webhook_registry(deps: WebhookDependencies) -> WebhookRegistry:
    """
    Build a registry with every Stripe handler registered.

    checkout.session.completed is served by a chain: product handlers are
    tried first, in order, and course checkouts fall through to
    CheckoutCompletedHandler.
    """
    registry = WebhookRegistry()
    registry.register_all(
        [
            PaymentSucceededHandler(),
            GuardedHandlerChain(
                StripeEventType.CHECKOUT_SESSION_COMPLETED,
                candidates=[
                    AIPremiumPurchaseHandler(deps),
                    TextbookPurchaseHandler(deps),
                    ToolkitPurchaseHandler(deps),
                ],
                fallback=CheckoutCompletedHandler(deps),
            ),
        ]
    )
    return registry


__all__ = [
    "BaseWebhookHandler",
    "WebhookRegistry",
    "GuardedHandlerChain",
    "WebhookDependencies",
    "Repositories",
    "WebhookError",
    "EventTypeMismatchError",
    "MissingCustomerDataError",
    "ProductNotFoundError",
    "PaymentSucceededHandler",
    "CheckoutCompletedHandler",
    "AIPremiumPurchaseHandler",
    "TextbookPurchaseHandler",
    "ToolkitPurchaseHandler",
    "create_stripe_webhook_registry",
]
