"""
Integration tests for the Stripe webhook endpoint.

Signature verification is faked on the payment provider; dispatch runs the
real handler registry against the in-memory database.
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from adapters.payments import StripeWebhookError
from core.domain.webhook import WebhookEvent
from infrastructure.database.models import EmailLog, User

pytestmark = pytest.mark.asyncio

WEBHOOK_URL = "/api/v1/webhooks/stripe"
SIGNATURE = {"Stripe-Signature": "t=1700000000,v1=deadbeef"}


class TestStripeWebhookEndpoint:
    async def test_missing_signature_returns_400(self, async_client: AsyncClient, payments):
        response = await async_client.post(WEBHOOK_URL, content=b"{}")

        assert response.status_code == 400
        payments.construct_webhook_event.assert_not_called()

    async def test_invalid_signature_returns_400(self, async_client: AsyncClient, payments):
        payments.construct_webhook_event.side_effect = StripeWebhookError("Invalid signature")

        response = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid signature"

    async def test_unconfigured_stripe_returns_503(self, app, async_client: AsyncClient, test_settings):
        app.state.settings = test_settings.model_copy(update={"stripe_webhook_secret": None})

        response = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert response.status_code == 503

    async def test_raw_body_is_verified(self, async_client: AsyncClient, payments):
        body = b'{"id": "evt_raw", "type": "customer.created"}'
        payments.construct_webhook_event.return_value = WebhookEvent(
            id="evt_raw", type="customer.created", data={}
        )

        await async_client.post(WEBHOOK_URL, content=body, headers=SIGNATURE)

        payments.construct_webhook_event.assert_called_once_with(body, SIGNATURE["Stripe-Signature"])

    async def test_unhandled_event_type_is_acknowledged(self, async_client: AsyncClient, payments):
        payments.construct_webhook_event.return_value = WebhookEvent(
            id="evt_other", type="customer.created", data={"id": "cus_1"}
        )

        response = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": False}

    async def test_payment_intent_succeeded(
        self, async_client: AsyncClient, payments, payment_intent_event
    ):
        payments.construct_webhook_event.return_value = payment_intent_event

        response = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": True}

    async def test_checkout_completed_fulfills_course(
        self,
        async_client: AsyncClient,
        payments,
        line_items,
        make_checkout_event,
        session_factory,
        email_service,
    ):
        payments.construct_webhook_event.return_value = make_checkout_event(email="course@example.com")
        payments.list_line_items.return_value = line_items({"tier": "premium", "total_lvl_ups": "1"})

        response = await async_client.post(
            WEBHOOK_URL, content=json.dumps({"id": "evt_test_checkout"}), headers=SIGNATURE
        )

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": True}
        async with session_factory() as session:
            user = (await session.execute(select(User))).scalar_one()
            logs = (await session.execute(select(EmailLog))).scalars().all()
        assert user.email == "course@example.com"
        assert user.tier == "premium"
        assert user.bonus_points == 100
        assert [log.status for log in logs] == ["sent"]
        email_service.send_email.assert_awaited_once()

    async def test_fulfillment_failure_returns_500_for_retry(
        self, async_client: AsyncClient, payments, make_checkout_event, alerts
    ):
        payments.construct_webhook_event.return_value = make_checkout_event(email=None)

        response = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert response.status_code == 500
        assert response.json()["detail"] == "Webhook processing failed"
        alerts.alert_critical_error.assert_awaited_once()

    async def test_redelivered_product_purchase_is_idempotent(
        self, async_client: AsyncClient, payments, make_checkout_event, session_factory, email_service
    ):
        payments.construct_webhook_event.return_value = make_checkout_event(
            email="reader@example.com", metadata={"product_slug": "textbook"}
        )

        first = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)
        second = await async_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNATURE)

        assert first.status_code == second.status_code == 200
        assert email_service.send_email.await_count == 1


class TestHealthEndpoints:
    async def test_health(self, async_client: AsyncClient, test_settings):
        response = await async_client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "testing"
        assert body["stripe_configured"] is True

    async def test_liveness(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/live")

        assert response.json() == {"alive": True}

    async def test_database_probe(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/db")

        assert response.json()["database"] == "connected"

    async def test_readiness_without_cache(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/ready")

        body = response.json()
        assert body["ready"] is True
        assert body["cache"] == "disabled"
        assert body["handlers"] == "registered"

    async def test_request_id_is_echoed_when_uuid(self, async_client: AsyncClient):
        request_id = "3f0c8a52-5d3e-4a8e-9b7f-1c2d3e4f5a6b"

        response = await async_client.get("/api/v1/health/live", headers={"X-Request-ID": request_id})

        assert response.headers["X-Request-ID"] == request_id

    async def test_non_uuid_request_id_is_replaced(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/live", headers={"X-Request-ID": "<script>"})

        assert response.headers["X-Request-ID"] != "<script>"
