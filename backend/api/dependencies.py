"""
API dependencies for the webhook endpoint.

Collaborators are built once in the application lifespan and stored on
``app.state``; these helpers read them back per request.
"""

from fastapi import HTTPException, Request, status

from core.interfaces.services import PaymentProvider
from infrastructure.config.settings import Settings, get_settings
from services.webhooks import WebhookRegistry


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_webhook_registry(request: Request) -> WebhookRegistry:
    registry = getattr(request.app.state, "webhook_registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook processing not initialized",
        )
    return registry


def get_payment_provider(request: Request) -> PaymentProvider:
    provider = getattr(request.app.state, "payments", None)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment provider not initialized",
        )
    return provider
