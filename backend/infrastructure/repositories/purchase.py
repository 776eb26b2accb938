"""
Product catalog and purchase ledger persistence.
"""

import logging
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from infrastructure.cache import CacheKeys
from infrastructure.database.models import Product, Purchase

from .base import BaseRepository

logger = logging.getLogger(__name__)


class PurchaseRepository(BaseRepository[Purchase]):
    model = Purchase

    async def find_existing(
        self,
        user_id: str,
        product_slug: str,
        idempotency_key: str,
    ) -> Optional[Purchase]:
        return await self.find_one(
            user_id=user_id,
            product_slug=product_slug,
            idempotency_key=idempotency_key,
        )

    async def record_once(self, **values: Any) -> tuple[Purchase, bool]:
        """
        Insert a purchase unless one with the same idempotency key exists.

        The unique constraint decides races between concurrent deliveries;
        the loser gets the winner's row back.

        Returns:
            Tuple of (purchase, created)
        """
        existing = await self.find_existing(
            values["user_id"], values["product_slug"], values["idempotency_key"]
        )
        if existing is not None:
            return existing, False

        try:
            async with self.session.begin_nested():
                purchase = Purchase(**values)
                self.session.add(purchase)
        except IntegrityError:
            existing = await self.find_existing(
                values["user_id"], values["product_slug"], values["idempotency_key"]
            )
            if existing is None:
                raise
            logger.info("Purchase %s recorded concurrently", values["idempotency_key"])
            return existing, False

        return purchase, True


class ProductRepository(BaseRepository[Product]):
    model = Product

    def cache_keys(self, entity: Product) -> list[str]:
        return [CacheKeys.product(entity.slug)]

    async def find_by_slug(self, slug: str) -> Optional[Product]:
        return await self.find_one(slug=slug)

    async def get_catalog_entry(self, slug: str) -> Optional[dict[str, Any]]:
        """Read-through cached catalog row for ``slug``."""

        async def load() -> Optional[dict[str, Any]]:
            product = await self.find_by_slug(slug)
            return self.to_snapshot(product) if product is not None else None

        return await self._read_through(CacheKeys.product(slug), load)

    async def increment_purchases(self, slug: str) -> None:
        async with self._timed("increment_purchases"):
            await self.session.execute(
                update(Product)
                .where(Product.slug == slug)
                .values(total_purchases=Product.total_purchases + 1)
                .execution_options(synchronize_session=False)
            )
        if self.cache is not None:
            await self.cache.delete(CacheKeys.product(slug))
