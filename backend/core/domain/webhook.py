"""Webhook event entities."""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)


class StripeEventType:
    """Stripe event types the application reacts to."""

    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


@dataclass(frozen=True)
class WebhookEvent:
    """A verified payment-provider notification.

    Identity is the provider-assigned ``id``. Instances are created once by
    the HTTP boundary and never mutated afterwards.
    """

    id: str
    type: str
    data: Mapping[str, Any]
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    livemode: bool = False
    api_version: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def from_stripe_payload(cls, payload: Mapping[str, Any]) -> "WebhookEvent":
        """Build an event from a Stripe event dictionary.

        Raises:
            ValueError: If the payload has no id or type.
        """
        event_id = payload.get("id")
        event_type = payload.get("type")
        if not event_id or not event_type:
            raise ValueError("Stripe event payload requires 'id' and 'type'")

        data = payload.get("data") or {}
        return cls(
            id=str(event_id),
            type=str(event_type),
            data=data.get("object") or {},
            livemode=bool(payload.get("livemode", False)),
            api_version=payload.get("api_version"),
        )


@dataclass(frozen=True)
class ReturnState:
    """Client state round-tripped through ``client_reference_id``."""

    user_id: str | None = None
    user_email: str | None = None
    session_id: str | None = None

    @classmethod
    def parse(cls, raw: str | None) -> "ReturnState":
        """Parse JSON return state; malformed or non-JSON values yield an empty state."""
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("client_reference_id is not JSON return state: %r", raw[:100])
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls(
            user_id=data.get("userId"),
            user_email=data.get("userEmail"),
            session_id=data.get("sessionId"),
        )


@dataclass(frozen=True)
class CheckoutSession:
    """The subset of a Stripe Checkout Session the handlers rely on."""

    id: str
    customer_email: str | None
    customer_name: str | None
    customer_id: str | None
    amount_total: int
    currency: str
    payment_intent: str | None
    metadata: Mapping[str, str]
    client_reference_id: str | None = None

    @classmethod
    def from_event(cls, event: WebhookEvent) -> "CheckoutSession":
        obj = event.data
        details = obj.get("customer_details") or {}
        email = details.get("email") or obj.get("customer_email")
        payment_intent = obj.get("payment_intent")
        if isinstance(payment_intent, Mapping):
            payment_intent = payment_intent.get("id")
        return cls(
            id=str(obj.get("id", "")),
            customer_email=email.strip().lower() if email else None,
            customer_name=details.get("name"),
            customer_id=obj.get("customer"),
            amount_total=int(obj.get("amount_total") or 0),
            currency=obj.get("currency") or "usd",
            payment_intent=payment_intent,
            metadata=dict(obj.get("metadata") or {}),
            client_reference_id=obj.get("client_reference_id"),
        )

    @property
    def product_slug(self) -> str | None:
        return self.metadata.get("product_slug")

    @property
    def idempotency_key(self) -> str:
        """Payment intent id, or the session id for $0 checkouts without one."""
        return self.payment_intent or self.id

    @property
    def amount_paid(self) -> Decimal:
        """Amount in major currency units."""
        return Decimal(self.amount_total) / Decimal(100)

    @property
    def return_state(self) -> ReturnState:
        return ReturnState.parse(self.client_reference_id)
