"""
AI premium builder purchases.
"""

import logging

from adapters.email.templates import ai_premium_subject, render_ai_premium_purchase
from core.domain.purchase import EmailType, ProductSlug
from core.domain.webhook import CheckoutSession
from infrastructure.database.models import Purchase, User

from ..dependencies import Repositories
from .purchase_base import PurchaseHandler, PurchaseOutcome

logger = logging.getLogger(__name__)


class AIPremiumPurchaseHandler(PurchaseHandler):
    """Grants AI credits and the premium model, and unlocks the demo project."""

    product_slug = ProductSlug.AI_PREMIUM
    email_type = EmailType.AI_PREMIUM_PURCHASE

    @property
    def credits_granted(self) -> int:
        return self.deps.settings.ai_premium_credits

    async def apply(
        self,
        repos: Repositories,
        session: CheckoutSession,
        user: User,
        purchase: Purchase,
        outcome: PurchaseOutcome,
    ) -> None:
        settings = self.deps.settings
        await repos.users.add_ai_credits(user, self.credits_granted, settings.ai_premium_model_tier)
        await repos.users.record_spend(user, session.amount_paid, ProductSlug.AI_PREMIUM.value)

        project_id = session.return_state.session_id
        if project_id:
            project = await repos.demo_projects.mark_ai_premium_paid(
                project_id,
                payment_intent=session.idempotency_key,
                credits=self.credits_granted,
                model_tier=settings.ai_premium_model_tier,
                retention_days=settings.demo_data_retention_days,
                user_id=user.id,
            )
            if project is None:
                logger.warning("Demo project %s not found for AI premium purchase", project_id)
            else:
                outcome.demo_project_id = project.id

        await repos.checkout_sessions.mark_completed(session.id)
        logger.info(
            "Granted %d AI credits",
            self.credits_granted,
            extra={"user_id": user.id, "purchase_id": purchase.id},
        )

    def render_email(self, session: CheckoutSession, outcome: PurchaseOutcome) -> tuple[str, str]:
        settings = self.deps.settings
        html = render_ai_premium_purchase(
            credits=self.credits_granted,
            model_tier=settings.ai_premium_model_tier,
            retention_days=settings.demo_data_retention_days,
            site_url=settings.site_url.rstrip("/"),
        )
        return ai_premium_subject(), html
