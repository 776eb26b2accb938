"""Stripe webhook handlers."""

from .ai_premium import AIPremiumPurchaseHandler
from .checkout_completed import CheckoutCompletedHandler
from .payment_succeeded import PaymentSucceededHandler
from .purchase_base import PurchaseHandler, PurchaseOutcome
from .textbook import TextbookPurchaseHandler
from .toolkit_purchase import ToolkitPurchaseHandler

__all__ = [
    "PaymentSucceededHandler",
    "CheckoutCompletedHandler",
    "PurchaseHandler",
    "PurchaseOutcome",
    "AIPremiumPurchaseHandler",
    "TextbookPurchaseHandler",
    "ToolkitPurchaseHandler",
]
