"""
Resend email service adapter.
"""

import asyncio
import logging
import time
from typing import Optional

import resend

from core.interfaces.services import EmailResult, EmailService
from infrastructure.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when Resend rejects or fails to accept an email."""

    pass


class ResendEmailService(EmailService):
    """Email service using Resend API."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or default_settings
        self._api_key = self._settings.resend_api_key
        self._from_email = self._settings.resend_from_email
        if self._api_key:
            resend.api_key = self._api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        from_email: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> EmailResult:
        """
        Send an email through Resend.

        Without an API key the email is logged and reported as accepted, so
        local development never needs Resend credentials.

        Args:
            to: Recipient email address
            subject: Subject line
            html: HTML body
            from_email: Sender, defaults to RESEND_FROM_EMAIL
            reply_to: Optional reply-to address

        Returns:
            EmailResult with the Resend message id

        Raises:
            EmailDeliveryError: If Resend fails to accept the email
        """
        if not self._api_key:
            logger.info("[DEV] Email to %s: %s", to, subject)
            return EmailResult(id=None, to=to, subject=subject)

        params: dict = {
            "from": from_email or self._from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if reply_to:
            params["reply_to"] = reply_to

        start = time.perf_counter()
        try:
            response = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.error(
                "Resend send failed for %s: %s",
                to,
                e,
                extra={"operation": "send_email", "duration_ms": duration_ms},
            )
            raise EmailDeliveryError(f"Failed to send email to {to}: {e}") from e

        message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "Email sent to %s (%s)",
            to,
            message_id,
            extra={"operation": "send_email", "duration_ms": duration_ms},
        )
        return EmailResult(id=message_id, to=to, subject=subject)


def create_email_service(settings: Optional[Settings] = None) -> ResendEmailService:
    """Create a Resend email service."""
    return ResendEmailService(settings=settings)
