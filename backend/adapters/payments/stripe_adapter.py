"""
Stripe payments adapter for webhook processing.

Wraps the blocking ``stripe`` SDK: webhook signature verification, checkout
session retrieval and line item listing. SDK calls run in a worker thread so
they never block the event loop, and SDK errors are translated into the
adapter's own exception hierarchy.
"""

import asyncio
import json
import logging
import time
from typing import Any

import stripe

from core.domain.webhook import WebhookEvent
from core.interfaces.services import PaymentProvider
from infrastructure.config.settings import Settings, settings

logger = logging.getLogger(__name__)


# Custom Exceptions
class StripeAdapterError(Exception):
    """Base exception for Stripe adapter errors."""

    pass


class StripeAPIError(StripeAdapterError):
    """Raised when the Stripe API returns an error."""

    pass


class StripeWebhookError(StripeAdapterError):
    """Raised when webhook verification or parsing fails."""

    pass


class StripeAuthError(StripeAdapterError):
    """Raised when API authentication fails or keys are missing."""

    pass


def _to_plain(obj: Any) -> Any:
    """Convert a StripeObject (or anything dict-like) to plain dicts and lists."""
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, list):
        return [_to_plain(item) for item in obj]
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        obj = to_dict()
    if isinstance(obj, dict):
        return {k: _to_plain(v) for k, v in obj.items()}
    return obj


class StripeAdapter(PaymentProvider):
    """
    Stripe API adapter.

    Only the operations webhook fulfillment needs are wrapped.
    """

    def __init__(
        self,
        api_key: str | None = None,
        webhook_secret: str | None = None,
        api_version: str | None = None,
        max_network_retries: int | None = None,
    ):
        """
        Initialize Stripe adapter.

        Args:
            api_key: Stripe secret key (defaults to settings)
            webhook_secret: Webhook endpoint signing secret (defaults to settings)
            api_version: Pinned API version (defaults to settings / account default)
            max_network_retries: SDK retry count for transient failures
        """
        self.api_key = api_key or settings.stripe_secret_key
        self.webhook_secret = webhook_secret or settings.stripe_webhook_secret
        self.api_version = api_version or settings.stripe_api_version

        retries = (
            max_network_retries
            if max_network_retries is not None
            else settings.stripe_max_network_retries
        )
        stripe.max_network_retries = retries

        if not self.api_key:
            logger.warning("Stripe secret key not configured. Set STRIPE_SECRET_KEY in settings.")

    def _request_options(self) -> dict[str, Any]:
        if not self.api_key:
            raise StripeAuthError("Stripe secret key not configured. Set STRIPE_SECRET_KEY in settings.")
        options: dict[str, Any] = {"api_key": self.api_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    async def _call(self, operation: str, func, *args, **kwargs) -> Any:
        """Run a blocking SDK call in a thread with timing and error translation."""
        start = time.perf_counter()
        try:
            result = await asyncio.to_thread(func, *args, **kwargs)
        except stripe.AuthenticationError as e:
            logger.error(f"Stripe authentication failed during {operation}: {e}")
            raise StripeAuthError(f"Authentication failed: {e}") from e
        except stripe.StripeError as e:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.error(
                f"Stripe API error during {operation}: {e}",
                extra={"operation": operation, "duration_ms": duration_ms},
            )
            raise StripeAPIError(f"{operation} failed: {e}") from e

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.debug(
            f"Stripe {operation} completed ({duration_ms}ms)",
            extra={"operation": operation, "duration_ms": duration_ms},
        )
        return result

    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """
        Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body, exactly as received
            signature: Value of the Stripe-Signature header

        Returns:
            WebhookEvent

        Raises:
            StripeWebhookError: If the secret is missing, the signature does
                not match, or the body is not a valid event
        """
        if not self.webhook_secret:
            raise StripeWebhookError(
                "Webhook secret not configured. Set STRIPE_WEBHOOK_SECRET in settings."
            )

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Stripe webhook signature verification failed")
            raise StripeWebhookError(f"Invalid signature: {e}") from e
        except ValueError as e:
            logger.warning(f"Stripe webhook payload is not valid JSON: {e}")
            raise StripeWebhookError(f"Invalid payload: {e}") from e

        try:
            event = WebhookEvent.from_stripe_payload(json.loads(payload))
        except (ValueError, TypeError, AttributeError) as e:
            raise StripeWebhookError(f"Failed to parse webhook event: {e}") from e

        logger.debug(
            f"Stripe webhook event constructed: {event.type}",
            extra={"event_id": event.id, "event_type": event.type},
        )
        return event

    async def retrieve_checkout_session(self, session_id: str) -> dict[str, Any]:
        """
        Fetch a checkout session.

        Raises:
            StripeAPIError: If the API request fails
        """
        session = await self._call(
            "retrieve_checkout_session",
            stripe.checkout.Session.retrieve,
            session_id,
            **self._request_options(),
        )
        return _to_plain(session)

    async def list_line_items(
        self,
        session_id: str,
        expand: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        List the line items of a checkout session.

        Args:
            session_id: Checkout session ID
            expand: Fields to expand, e.g. ``["data.price.product"]``

        Returns:
            Line items as plain dictionaries

        Raises:
            StripeAPIError: If the API request fails
        """
        params: dict[str, Any] = dict(self._request_options())
        if expand:
            params["expand"] = expand

        result = await self._call(
            "list_line_items",
            stripe.checkout.Session.list_line_items,
            session_id,
            **params,
        )
        items = _to_plain(result).get("data") or []
        logger.debug(f"Listed {len(items)} line items for session {session_id}")
        return items


# Factory function for easy instantiation
def create_stripe_adapter(config: Settings | None = None) -> StripeAdapter:
    """
    Create a Stripe adapter from ``config``.

    The app passes the same settings its webhook route checks, so the route's
    ``stripe_configured`` gate and the adapter's keys always agree.
    """
    config = config or settings
    return StripeAdapter(
        api_key=config.stripe_secret_key,
        webhook_secret=config.stripe_webhook_secret,
        api_version=config.stripe_api_version,
        max_network_retries=config.stripe_max_network_retries,
    )
