"""
checkout.session.completed handler for course purchases.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from adapters.email.templates import payment_confirmation_subject, render_payment_confirmation
from core.domain.entitlement import Entitlement, parse_product_metadata
from core.domain.purchase import EmailType, ProductSlug
from core.domain.user import PaymentStatus, is_tier_upgrade
from core.domain.webhook import CheckoutSession, StripeEventType, WebhookEvent
from infrastructure.database.models import Lead, User
from infrastructure.logging_config import log_payment, log_security

from ..base import BaseWebhookHandler
from ..dependencies import Repositories, WebhookDependencies
from ..errors import MissingCustomerDataError
from ..notifications import deliver_confirmation

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    user_id: str
    customer_name: str
    entitlement: Entitlement
    reset_link: Optional[str] = None


class CheckoutCompletedHandler(BaseWebhookHandler):
    """
    Fulfills course purchases.

    Creates or upgrades the user (tier never moves down), converts the lead,
    credits LevelUp sessions as bonus points and sends a payment confirmation.
    A ``course`` row in the purchase ledger, keyed by the payment intent, makes
    a redelivered event a no-op.
    Any failure before the confirmation email raises a critical alert and is
    re-raised so Stripe redelivers the event.
    """

    event_type = StripeEventType.CHECKOUT_SESSION_COMPLETED

    def __init__(self, deps: WebhookDependencies):
        self.deps = deps

    async def handle(self, event: WebhookEvent) -> None:
        try:
            session = CheckoutSession.from_event(event)
            log_extra = {"type": "checkout", "session_id": session.id, "customer_email": session.customer_email}
            if not session.customer_email:
                logger.error("No customer email in checkout session", extra=log_extra)
                raise MissingCustomerDataError("No customer email in checkout session")

            logger.info("Processing checkout session", extra=log_extra)
            entitlement = await self._resolve_entitlement(session)

            async with self.deps.unit_of_work() as repos:
                result = await self._fulfill(repos, session, entitlement)

            if result is None:
                return

            log_payment(
                "charge",
                "succeeded",
                session.amount_total,
                session.currency,
                user_id=result.user_id,
                tier=entitlement.tier.value,
                sessions_to_credit=entitlement.sessions_to_credit,
                customer_id=session.customer_id,
            )
        except Exception as e:
            await self.deps.alerts.alert_critical_error(e, "Stripe checkout fulfillment", alert_context(event))
            raise

        await self._send_confirmation(session, result)

    async def _resolve_entitlement(self, session: CheckoutSession) -> Entitlement:
        line_items = await self.deps.payments.list_line_items(
            session.id, expand=["data.price.product"]
        )
        metadata = product_metadata(line_items)
        logger.debug("Retrieved product metadata", extra={"session_id": session.id, "metadata": metadata})

        entitlement = parse_product_metadata(
            metadata, addon_sessions=self.deps.settings.basic_course_addon_sessions
        )
        if not entitlement.recognized:
            logger.warning(
                "Unrecognized product metadata for session %s, fulfilling as basic",
                session.id,
                extra={"session_id": session.id, "metadata": metadata},
            )
        return entitlement

    async def _fulfill(
        self,
        repos: Repositories,
        session: CheckoutSession,
        entitlement: Entitlement,
    ) -> Optional[CheckoutResult]:
        """Apply the purchase once; None when this payment was already fulfilled."""
        email = session.customer_email
        lead = await repos.leads.find_by_email(email)
        user = await repos.users.find_by_email(email)
        customer_name = session.customer_name or (lead.name if lead else None) or ""
        reset_link = None
        created = False

        if user is None:
            user, created = await repos.users.get_or_create(
                email,
                full_name=(lead.name if lead else None) or session.customer_name or "",
                password_hash=self.deps.identity.create_credentials(),
                email_verified=True,
                tier=entitlement.tier.value,
                payment_status=entitlement.payment_status.value,
            )

        purchase, recorded = await repos.purchases.record_once(
            user_id=user.id,
            product_slug=ProductSlug.COURSE.value,
            idempotency_key=session.idempotency_key,
            stripe_session_id=session.id,
            amount_paid=session.amount_paid,
            credits_granted=entitlement.sessions_to_credit,
            access_granted=True,
        )
        if not recorded:
            logger.info(
                "Purchase already recorded (idempotent)",
                extra={"purchase_id": purchase.id, "user_id": user.id, "session_id": session.id},
            )
            return None

        if created:
            reset_link = self.deps.identity.generate_password_reset_link(user.id, email)
            logger.info("Created new user", extra={"user_id": user.id, "session_id": session.id})
            log_security("signup", "low", user_id=user.id, email=email, source="payment")
        else:
            await self._upgrade(repos, user, entitlement)

        if lead is not None:
            await self._convert_lead(repos, lead)

        if entitlement.sessions_to_credit > 0:
            points = entitlement.sessions_to_credit * self.deps.settings.bonus_points_per_session
            # LevelUp sessions are credited as bonus points until sessions have their own ledger
            await repos.users.add_bonus_points(user, points)
            logger.info(
                "Awarded %d bonus points for %d sessions",
                points,
                entitlement.sessions_to_credit,
                extra={"user_id": user.id},
            )

        return CheckoutResult(
            user_id=user.id,
            customer_name=customer_name,
            entitlement=entitlement,
            reset_link=reset_link,
        )

    async def _upgrade(self, repos: Repositories, user: User, entitlement: Entitlement) -> None:
        if not is_tier_upgrade(user.tier, entitlement.tier):
            logger.info(
                "User already exists at tier %s, keeping it",
                user.tier,
                extra={"user_id": user.id},
            )
            if user.payment_status != PaymentStatus.PAID.value:
                await repos.users.update(user, payment_status=PaymentStatus.PAID.value)
            return

        old_tier = user.tier
        await repos.users.update_tier_and_payment(user, entitlement.tier, PaymentStatus.PAID)
        logger.info(
            "Upgraded user tier from %s to %s",
            old_tier,
            entitlement.tier.value,
            extra={"user_id": user.id},
        )

    async def _convert_lead(self, repos: Repositories, lead: Lead) -> None:
        was_converted = lead.is_converted
        await repos.leads.mark_as_converted(lead)
        if not was_converted:
            logger.info("Marked lead %s as converted", lead.id)

    async def _send_confirmation(self, session: CheckoutSession, result: CheckoutResult) -> None:
        tier = result.entitlement.tier.value
        html = render_payment_confirmation(
            customer_name=result.customer_name,
            tier=tier,
            sessions=result.entitlement.sessions_to_credit,
            portal_url=self.deps.settings.site_url.rstrip("/"),
            reset_link=result.reset_link,
        )
        await deliver_confirmation(
            self.deps,
            EmailType.PAYMENT_CONFIRMATION,
            to=session.customer_email,
            subject=payment_confirmation_subject(tier),
            html=html,
            user_id=result.user_id,
        )


def product_metadata(line_items: list[dict[str, Any]]) -> dict[str, str]:
    """Metadata of the expanded product on the first line item."""
    if not line_items:
        return {}
    product = (line_items[0].get("price") or {}).get("product")
    if not isinstance(product, dict):
        return {}
    return {k: str(v) for k, v in (product.get("metadata") or {}).items()}


def alert_context(event: WebhookEvent) -> dict[str, Any]:
    """Alert context read straight from the payload, so it survives a malformed session."""
    obj = event.data or {}
    details = obj.get("customer_details") or {}
    return {
        "event_id": event.id,
        "session_id": obj.get("id"),
        "customer_email": details.get("email") or obj.get("customer_email"),
        "amount_total": obj.get("amount_total"),
    }
