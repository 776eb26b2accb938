"""
Shared skeleton for one-off product purchases.
"""

import logging
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from core.domain.purchase import EmailType
from core.domain.webhook import CheckoutSession, StripeEventType, WebhookEvent
from infrastructure.database.models import Purchase, User
from infrastructure.logging_config import log_payment, log_security

from ..base import BaseWebhookHandler
from ..dependencies import Repositories, WebhookDependencies
from ..errors import MissingCustomerDataError
from ..notifications import deliver_confirmation

logger = logging.getLogger(__name__)


@dataclass
class PurchaseOutcome:
    """What a committed purchase needs for its confirmation email."""

    user_id: str
    email: str
    purchase_id: str
    customer_name: str = ""
    demo_project_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)


class PurchaseHandler(BaseWebhookHandler):
    """
    Idempotent fulfillment of a single product.

    The purchase row and the product-specific change commit together, keyed
    by the payment intent id (or the session id for $0 checkouts). A
    redelivered event finds the existing row and stops before touching any
    state. The confirmation email goes out after commit and is best-effort.
    """

    event_type = StripeEventType.CHECKOUT_SESSION_COMPLETED
    product_slug: ClassVar[str]
    email_type: ClassVar[EmailType]

    def __init__(self, deps: WebhookDependencies):
        self.deps = deps

    def can_handle(self, event: WebhookEvent) -> bool:
        if event.type != self.event_type:
            return False
        metadata = event.data.get("metadata") or {}
        return metadata.get("product_slug") == self.product_slug

    async def handle(self, event: WebhookEvent) -> None:
        session = CheckoutSession.from_event(event)
        log_extra = {
            "type": "purchase",
            "session_id": session.id,
            "product_slug": self.product_slug,
        }
        logger.info("Processing %s purchase", self.product_slug, extra=log_extra)

        async with self.deps.unit_of_work() as repos:
            outcome = await self._record(repos, session)

        if outcome is None:
            return

        log_payment(
            "charge",
            "succeeded",
            session.amount_total,
            session.currency,
            user_id=outcome.user_id,
            product_slug=self.product_slug,
            purchase_id=outcome.purchase_id,
        )

        subject, html = self.render_email(session, outcome)
        await deliver_confirmation(
            self.deps,
            self.email_type,
            to=outcome.email,
            subject=subject,
            html=html,
            user_id=outcome.user_id,
            demo_project_id=outcome.demo_project_id,
        )

    async def _record(self, repos: Repositories, session: CheckoutSession) -> Optional[PurchaseOutcome]:
        user = await self.resolve_user(repos, session)
        product = await self.resolve_product(repos, session)
        product_id = product["id"] if product else None
        key = session.idempotency_key

        purchase, created = await repos.purchases.record_once(
            user_id=user.id,
            product_slug=self.product_slug,
            product_id=product_id,
            idempotency_key=key,
            stripe_session_id=session.id,
            amount_paid=session.amount_paid,
            credits_granted=self.credits_granted,
            access_granted=True,
        )

        if not created:
            logger.info(
                "Purchase already recorded (idempotent)",
                extra={"purchase_id": purchase.id, "user_id": user.id, "session_id": session.id},
            )
            return None

        logger.info(
            "Purchase record created",
            extra={"purchase_id": purchase.id, "user_id": user.id, "product_slug": self.product_slug},
        )
        outcome = PurchaseOutcome(
            user_id=user.id,
            email=user.email,
            purchase_id=purchase.id,
            customer_name=session.customer_name or user.full_name or "",
        )
        if product:
            outcome.details["product_name"] = product["name"]
        await self.apply(repos, session, user, purchase, outcome)
        return outcome

    @property
    def credits_granted(self) -> int:
        return 0

    async def resolve_user(self, repos: Repositories, session: CheckoutSession) -> User:
        """User from the return state id, else by email, else a new account."""
        state = session.return_state
        if state.user_id:
            user = await repos.users.find_by_id(state.user_id)
            if user is not None:
                return user
            logger.warning("Return state user %s not found, falling back to email", state.user_id)

        email = session.customer_email or (state.user_email or "").strip().lower()
        if not email:
            raise MissingCustomerDataError("No email found in checkout session")

        user, created = await repos.users.get_or_create(
            email,
            full_name=session.customer_name or "",
            password_hash=self.deps.identity.create_credentials(),
            email_verified=True,
        )
        if created:
            log_security("signup", "low", user_id=user.id, email=email, source=self.product_slug)
        return user

    async def resolve_product(
        self, repos: Repositories, session: CheckoutSession
    ) -> Optional[dict[str, Any]]:
        """Catalog entry the purchase row links to, if the product is in the catalog."""
        return None

    @abstractmethod
    async def apply(
        self,
        repos: Repositories,
        session: CheckoutSession,
        user: User,
        purchase: Purchase,
        outcome: PurchaseOutcome,
    ) -> None:
        """Product-specific state change, inside the purchase transaction."""
        ...

    @abstractmethod
    def render_email(self, session: CheckoutSession, outcome: PurchaseOutcome) -> tuple[str, str]:
        """Return (subject, html) for the confirmation email."""
        ...
