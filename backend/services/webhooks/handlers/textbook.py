"""
Textbook purchases.
"""

from adapters.email.templates import render_textbook_purchase, textbook_subject
from core.domain.purchase import EmailType, ProductSlug
from core.domain.webhook import CheckoutSession
from infrastructure.database.models import Purchase, User

from ..dependencies import Repositories
from .purchase_base import PurchaseHandler, PurchaseOutcome


class TextbookPurchaseHandler(PurchaseHandler):
    """Adds to lifetime spend and raises the highest purchased tier to textbook."""

    product_slug = ProductSlug.TEXTBOOK
    email_type = EmailType.TEXTBOOK_PURCHASE

    async def apply(
        self,
        repos: Repositories,
        session: CheckoutSession,
        user: User,
        purchase: Purchase,
        outcome: PurchaseOutcome,
    ) -> None:
        await repos.users.record_spend(user, session.amount_paid, ProductSlug.TEXTBOOK.value)
        await repos.checkout_sessions.mark_completed(session.id)

    def render_email(self, session: CheckoutSession, outcome: PurchaseOutcome) -> tuple[str, str]:
        return textbook_subject(), render_textbook_purchase(self.deps.settings.site_url.rstrip("/"))
