"""
Email audit log persistence.
"""

from typing import Optional

from core.domain.purchase import EmailStatus, EmailType
from infrastructure.database.models import EmailLog

from .base import BaseRepository


class EmailLogRepository(BaseRepository[EmailLog]):
    model = EmailLog

    async def log(
        self,
        email_type: EmailType,
        recipient_email: str,
        status: EmailStatus,
        user_id: Optional[str] = None,
        demo_project_id: Optional[str] = None,
        provider_message_id: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> EmailLog:
        return await self.create(
            email_type=email_type.value,
            recipient_email=recipient_email,
            status=status.value,
            user_id=user_id,
            demo_project_id=demo_project_id,
            provider_message_id=provider_message_id,
            error_message=error_message[:1000] if error_message else None,
        )
