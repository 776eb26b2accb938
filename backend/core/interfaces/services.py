"""Service interfaces for external integrations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..domain.webhook import WebhookEvent


@dataclass
class EmailResult:
    """Result of a successfully accepted email."""

    id: str | None
    to: str
    subject: str


class EmailService(ABC):
    """Abstract service for transactional email."""

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> EmailResult:
        """Send an email; raises on provider failure."""
        ...


class PaymentProvider(ABC):
    """Abstract payment provider used by webhook processing."""

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify a webhook signature and parse the event."""
        ...

    @abstractmethod
    async def retrieve_checkout_session(self, session_id: str) -> dict[str, Any]:
        """Fetch a checkout session."""
        ...

    @abstractmethod
    async def list_line_items(
        self,
        session_id: str,
        expand: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """List the line items of a checkout session."""
        ...


class IdentityAdmin(ABC):
    """Admin-level account provisioning for users created by checkout."""

    @abstractmethod
    def create_credentials(self) -> str:
        """Return a password hash for a random password nobody knows."""
        ...

    @abstractmethod
    def generate_password_reset_link(self, user_id: str, email: str) -> str:
        """Build a link the user follows to choose a password."""
        ...


class AlertNotifier(ABC):
    """Channel for alerting operators about failures that lost revenue."""

    @abstractmethod
    async def alert_critical_error(
        self,
        error: BaseException,
        title: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Alert on a critical error; never raises."""
        ...

    @abstractmethod
    async def alert_high_priority_error(
        self,
        error: BaseException,
        title: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Alert on a failure that lost an audit trail but not revenue; never raises."""
        ...
