"""
Error alert service.

Emails operators immediately when a failure could lose revenue, such as a
paid checkout that was not fulfilled. Alerts go out only in production and
only for high or critical severity; everything else is logged.
"""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any, Optional

from adapters.email.templates import error_alert_subject, render_error_alert
from core.interfaces.services import AlertNotifier, EmailService
from infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)

ALERTABLE_SEVERITIES = frozenset({"critical", "high"})


class ErrorAlertService(AlertNotifier):
    """Sends error alert emails; never raises."""

    def __init__(self, email_service: EmailService, settings: Settings):
        self._email = email_service
        self._settings = settings

    async def send_error_alert(
        self,
        error: BaseException,
        location: str,
        severity: str,
        user_id: Optional[str] = None,
        additional_info: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Send an alert email for ``error``.

        Returns:
            True if an alert email was sent, False if suppressed or failed
        """
        if not self._settings.is_production:
            logger.warning(
                "Error alert suppressed (not production): %s: %s",
                location,
                error,
                extra={"severity": severity, "context": additional_info or {}},
            )
            return False

        if severity not in ALERTABLE_SEVERITIES:
            logger.info(
                "Error alert suppressed (severity %s): %s: %s",
                severity,
                location,
                error,
            )
            return False

        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        html = render_error_alert(
            severity=severity,
            location=location,
            message=str(error),
            timestamp=datetime.now(UTC).isoformat(),
            environment=self._settings.environment,
            user_id=user_id,
            traceback_text=tb if error.__traceback__ else None,
            additional_info=additional_info,
        )

        try:
            await self._email.send_email(
                to=self._settings.alert_recipient_email,
                subject=error_alert_subject(severity, location),
                html=html,
                from_email=self._settings.alert_from_email,
            )
        except Exception as e:
            logger.error(
                "Failed to send error alert email for %s: %s (original error: %s)",
                location,
                e,
                error,
            )
            return False

        logger.info("Error alert email sent: %s", location, extra={"severity": severity})
        return True

    async def alert_critical_error(
        self,
        error: BaseException,
        title: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        await self.send_error_alert(error, title, "critical", additional_info=context)

    async def alert_high_priority_error(
        self,
        error: BaseException,
        title: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        await self.send_error_alert(error, title, "high", additional_info=context)
