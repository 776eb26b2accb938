"""
Demo project and checkout session persistence.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional

from infrastructure.database.models import CheckoutSessionRecord, DemoProject

from .base import BaseRepository


class DemoProjectRepository(BaseRepository[DemoProject]):
    model = DemoProject

    async def mark_ai_premium_paid(
        self,
        project_id: str,
        payment_intent: str,
        credits: int,
        model_tier: str,
        retention_days: int,
        user_id: Optional[str] = None,
    ) -> Optional[DemoProject]:
        """Unlock AI premium on a demo project; returns None when it does not exist."""
        project = await self.find_by_id(project_id)
        if project is None:
            return None
        values = dict(
            ai_premium_paid=True,
            ai_premium_payment_intent=payment_intent,
            ai_credits_total=credits,
            ai_model_used=model_tier,
            is_data_retained=True,
            data_expires_at=datetime.now(UTC) + timedelta(days=retention_days),
        )
        if user_id and not project.user_id:
            values["user_id"] = user_id
        return await self.update(project, **values)


class CheckoutSessionRepository(BaseRepository[CheckoutSessionRecord]):
    model = CheckoutSessionRecord

    async def mark_completed(self, session_id: str) -> bool:
        record = await self.find_one(session_id=session_id)
        if record is None:
            return False
        await self.update(record, status="completed")
        return True
