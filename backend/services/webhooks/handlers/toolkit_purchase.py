"""
Architecture Mastery Toolkit purchases.
"""

import logging
from typing import Any, Optional

from adapters.email.templates import render_toolkit_purchase, toolkit_subject
from core.domain.purchase import EmailType, ProductSlug
from core.domain.webhook import CheckoutSession, WebhookEvent
from infrastructure.database.models import Purchase, User

from ..dependencies import Repositories
from ..errors import MissingCustomerDataError, ProductNotFoundError
from .purchase_base import PurchaseHandler, PurchaseOutcome

logger = logging.getLogger(__name__)


class ToolkitPurchaseHandler(PurchaseHandler):
    """
    Records lifetime access to the toolkit and bumps the product's purchase counter.

    The buyer is always a signed-in user, identified by ``metadata.user_id``.
    """

    product_slug = ProductSlug.ARCHITECTURE_TOOLKIT
    email_type = EmailType.TOOLKIT_PURCHASE

    async def handle(self, event: WebhookEvent) -> None:
        metadata = event.data.get("metadata") or {}
        if metadata.get("product_slug") != self.product_slug:
            logger.debug("Not a toolkit purchase, skipping %s", event.id)
            return
        await super().handle(event)

    async def resolve_user(self, repos: Repositories, session: CheckoutSession) -> User:
        user_id = session.metadata.get("user_id")
        if not user_id:
            logger.error("Missing user_id in metadata", extra={"session_id": session.id})
            raise MissingCustomerDataError("Missing user_id in checkout session metadata")

        user = await repos.users.find_by_id(user_id)
        if user is None:
            raise MissingCustomerDataError(f"User {user_id} from checkout metadata does not exist")
        return user

    async def resolve_product(
        self, repos: Repositories, session: CheckoutSession
    ) -> Optional[dict[str, Any]]:
        entry = await repos.products.get_catalog_entry(self.product_slug)
        if entry is None:
            logger.error("Product not found", extra={"product_slug": self.product_slug})
            raise ProductNotFoundError(self.product_slug)
        return entry

    async def apply(
        self,
        repos: Repositories,
        session: CheckoutSession,
        user: User,
        purchase: Purchase,
        outcome: PurchaseOutcome,
    ) -> None:
        await repos.products.increment_purchases(self.product_slug)

    def render_email(self, session: CheckoutSession, outcome: PurchaseOutcome) -> tuple[str, str]:
        product_name = outcome.details.get("product_name", "Architecture Mastery Toolkit")
        return (
            toolkit_subject(product_name),
            render_toolkit_purchase(product_name, self.deps.settings.site_url.rstrip("/")),
        )
