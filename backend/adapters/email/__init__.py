"""Email adapters."""

from .resend_adapter import EmailDeliveryError, ResendEmailService, create_email_service

__all__ = [
    "ResendEmailService",
    "EmailDeliveryError",
    "create_email_service",
]
