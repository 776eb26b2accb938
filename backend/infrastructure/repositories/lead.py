"""
Lead persistence.
"""

from datetime import UTC, datetime
from typing import Optional

from core.domain.lead import LeadStatus
from infrastructure.database.models import Lead

from .base import BaseRepository


class LeadRepository(BaseRepository[Lead]):
    model = Lead

    async def find_by_email(self, email: str) -> Optional[Lead]:
        return await self.find_one(email=email.strip().lower())

    async def mark_as_converted(self, lead: Lead) -> Lead:
        """Conversion is one-way; an existing ``converted_at`` is kept."""
        return await self.update(
            lead,
            status=LeadStatus.CONVERTED.value,
            converted_at=lead.converted_at or datetime.now(UTC),
        )
