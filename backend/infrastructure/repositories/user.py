"""
User persistence.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from core.domain.purchase import higher_purchase_tier
from core.domain.user import PaymentStatus, UserTier
from infrastructure.database.models import User

from .base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.find_one(email=email.strip().lower())

    async def get_or_create(self, email: str, **defaults: Any) -> tuple[User, bool]:
        """
        Return the user for ``email``, creating it if missing.

        The insert runs in a savepoint. If a concurrent delivery created the
        same email first, the unique violation is rolled back to the savepoint
        and the winner's row is returned with ``created=False``.

        Returns:
            Tuple of (user, created)
        """
        email = email.strip().lower()
        existing = await self.find_by_email(email)
        if existing is not None:
            return existing, False

        try:
            async with self.session.begin_nested():
                user = User(email=email, **defaults)
                self.session.add(user)
        except IntegrityError:
            logger.info("User %s created concurrently, using existing row", email)
            existing = await self.find_by_email(email)
            if existing is None:
                raise
            return existing, False

        return user, True

    async def update_tier_and_payment(
        self,
        user: User,
        tier: UserTier,
        payment_status: PaymentStatus,
    ) -> User:
        return await self.update(user, tier=tier.value, payment_status=payment_status.value)

    async def _increment(self, user: User, **increments: Any) -> User:
        """Atomic in-database ``column = column + delta`` updates."""
        values = {name: getattr(User, name) + delta for name, delta in increments.items()}
        async with self._timed("increment"):
            await self.session.execute(
                update(User)
                .where(User.id == user.id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.session.refresh(user, list(increments))
        return user

    async def add_bonus_points(self, user: User, points: int) -> User:
        return await self._increment(user, bonus_points=points)

    async def add_ai_credits(self, user: User, credits: int, model_tier: str) -> User:
        await self._increment(user, ai_credits=credits)
        return await self.update(user, ai_model_tier=model_tier)

    async def record_spend(self, user: User, amount: Decimal, purchase_tier: str) -> User:
        """Add to ``total_spent`` and raise ``highest_tier_purchased`` when ranked higher."""
        await self._increment(user, total_spent=amount)
        return await self.update(
            user,
            highest_tier_purchased=higher_purchase_tier(user.highest_tier_purchased, purchase_tier),
        )
