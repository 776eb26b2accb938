"""
Unit tests for the Stripe payments adapter.

The stripe SDK is patched; no network calls are made.
"""

import json
from unittest.mock import patch

import pytest
import stripe

from adapters.payments.stripe_adapter import (
    StripeAdapter,
    StripeAPIError,
    StripeAuthError,
    StripeWebhookError,
    create_stripe_adapter,
)

EVENT_PAYLOAD = {
    "id": "evt_test_1",
    "object": "event",
    "type": "checkout.session.completed",
    "livemode": False,
    "api_version": "2024-06-20",
    "data": {"object": {"id": "cs_test_1", "metadata": {"product_slug": "textbook"}}},
}


@pytest.fixture
def adapter() -> StripeAdapter:
    return StripeAdapter(
        api_key="sk_test_1234567890abcdef",
        webhook_secret="whsec_test1234567890abcdef",
        max_network_retries=1,
    )


class TestConstructWebhookEvent:
    def test_valid_signature(self, adapter):
        payload = json.dumps(EVENT_PAYLOAD).encode()

        with patch("stripe.Webhook.construct_event") as construct:
            event = adapter.construct_webhook_event(payload, "t=1,v1=abc")

        construct.assert_called_once_with(payload, "t=1,v1=abc", "whsec_test1234567890abcdef")
        assert event.id == "evt_test_1"
        assert event.type == "checkout.session.completed"
        assert event.data["metadata"] == {"product_slug": "textbook"}
        assert event.api_version == "2024-06-20"

    def test_invalid_signature(self, adapter):
        with patch(
            "stripe.Webhook.construct_event",
            side_effect=stripe.SignatureVerificationError("No signatures found", "t=1,v1=bad"),
        ):
            with pytest.raises(StripeWebhookError, match="Invalid signature"):
                adapter.construct_webhook_event(b"{}", "t=1,v1=bad")

    def test_invalid_payload(self, adapter):
        with patch("stripe.Webhook.construct_event", side_effect=ValueError("bad json")):
            with pytest.raises(StripeWebhookError, match="Invalid payload"):
                adapter.construct_webhook_event(b"not json", "t=1,v1=abc")

    def test_event_without_type_is_rejected(self, adapter):
        with patch("stripe.Webhook.construct_event"):
            with pytest.raises(StripeWebhookError, match="Failed to parse"):
                adapter.construct_webhook_event(json.dumps({"id": "evt_1"}).encode(), "sig")

    def test_missing_secret(self):
        adapter = StripeAdapter(api_key="sk_test_1234567890abcdef")
        adapter.webhook_secret = None

        with pytest.raises(StripeWebhookError, match="not configured"):
            adapter.construct_webhook_event(b"{}", "sig")


class TestApiCalls:
    async def test_list_line_items_returns_plain_dicts(self, adapter):
        response = {"object": "list", "data": [{"id": "li_1", "price": {"product": {"metadata": {"tier": "vip"}}}}]}

        with patch("stripe.checkout.Session.list_line_items", return_value=response) as call:
            items = await adapter.list_line_items("cs_test_1", expand=["data.price.product"])

        assert items == response["data"]
        args, kwargs = call.call_args
        assert args == ("cs_test_1",)
        assert kwargs["expand"] == ["data.price.product"]
        assert kwargs["api_key"] == "sk_test_1234567890abcdef"

    async def test_retrieve_checkout_session(self, adapter):
        with patch("stripe.checkout.Session.retrieve", return_value={"id": "cs_test_1"}):
            session = await adapter.retrieve_checkout_session("cs_test_1")

        assert session == {"id": "cs_test_1"}

    async def test_api_errors_are_translated(self, adapter):
        with patch(
            "stripe.checkout.Session.list_line_items",
            side_effect=stripe.APIConnectionError("connection refused"),
        ):
            with pytest.raises(StripeAPIError, match="list_line_items failed"):
                await adapter.list_line_items("cs_test_1")

    async def test_authentication_errors_are_translated(self, adapter):
        with patch(
            "stripe.checkout.Session.retrieve",
            side_effect=stripe.AuthenticationError("Invalid API Key"),
        ):
            with pytest.raises(StripeAuthError):
                await adapter.retrieve_checkout_session("cs_test_1")

    async def test_missing_api_key(self, adapter):
        adapter.api_key = None

        with pytest.raises(StripeAuthError):
            await adapter.list_line_items("cs_test_1")


def test_factory_uses_given_settings(test_settings):
    config = test_settings.model_copy(
        update={
            "stripe_secret_key": "sk_test_fromappsettings",
            "stripe_webhook_secret": "whsec_fromappsettings",
            "stripe_api_version": "2024-06-20",
        }
    )

    adapter = create_stripe_adapter(config)

    assert adapter.api_key == "sk_test_fromappsettings"
    assert adapter.webhook_secret == "whsec_fromappsettings"
    assert adapter.api_version == "2024-06-20"
