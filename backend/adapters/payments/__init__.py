"""Payment adapters."""

from .stripe_adapter import (
    StripeAdapter,
    StripeAdapterError,
    StripeAPIError,
    StripeAuthError,
    StripeWebhookError,
    create_stripe_adapter,
)

__all__ = [
    "StripeAdapter",
    "StripeAdapterError",
    "StripeAPIError",
    "StripeWebhookError",
    "StripeAuthError",
    "create_stripe_adapter",
]
