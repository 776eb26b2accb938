"""
Best-effort confirmation email delivery with an audit trail.
"""

import logging
from typing import Optional

from core.domain.purchase import EmailStatus, EmailType

from .dependencies import WebhookDependencies

logger = logging.getLogger(__name__)


async def deliver_confirmation(
    deps: WebhookDependencies,
    email_type: EmailType,
    to: str,
    subject: str,
    html: str,
    user_id: Optional[str] = None,
    demo_project_id: Optional[str] = None,
) -> bool:
    """
    Send a confirmation email and record an EmailLog row either way.

    Runs after fulfillment has committed, so nothing here raises: a provider
    outage must not turn a fulfilled payment into a redelivered webhook.

    Returns:
        True if the email was accepted by the provider
    """
    message_id = None
    error_message = None
    try:
        result = await deps.email.send_email(
            to=to,
            subject=subject,
            html=html,
            from_email=deps.settings.resend_from_email,
            reply_to=deps.settings.resend_reply_to,
        )
        message_id = result.id
        logger.info(
            "%s email sent to %s",
            email_type.value,
            to,
            extra={"type": "email", "user_id": user_id, "customer_email": to},
        )
    except Exception as e:
        error_message = str(e)
        logger.error(
            "Failed to send %s email to %s: %s",
            email_type.value,
            to,
            e,
            extra={"type": "email", "user_id": user_id, "customer_email": to},
        )

    status = EmailStatus.FAILED if error_message is not None else EmailStatus.SENT
    try:
        async with deps.unit_of_work() as repos:
            await repos.email_logs.log(
                email_type=email_type,
                recipient_email=to,
                status=status,
                user_id=user_id,
                demo_project_id=demo_project_id,
                provider_message_id=message_id,
                error_message=error_message,
            )
    except Exception as e:
        logger.error("Failed to write email log for %s: %s", to, e)
        await deps.alerts.alert_high_priority_error(
            e,
            "Email log write",
            {"email_type": email_type.value, "recipient": to, "user_id": user_id, "status": status.value},
        )

    return status is EmailStatus.SENT
