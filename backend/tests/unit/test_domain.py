"""
Unit tests for webhook domain values: entitlements, tiers and checkout sessions.
"""

import json
from decimal import Decimal

import pytest

from core.domain.entitlement import EntitlementSource, parse_product_metadata
from core.domain.purchase import higher_purchase_tier
from core.domain.user import PaymentStatus, UserTier, is_tier_upgrade
from core.domain.webhook import CheckoutSession, ReturnState, WebhookEvent


class TestParseProductMetadata:
    def test_explicit_tier_with_sessions(self):
        entitlement = parse_product_metadata({"tier": "premium", "total_lvl_ups": "4"})

        assert entitlement.tier == UserTier.PREMIUM
        assert entitlement.sessions_to_credit == 4
        assert entitlement.payment_status == PaymentStatus.PAID
        assert entitlement.source == EntitlementSource.EXPLICIT_TIER
        assert entitlement.recognized

    def test_premium_vip_alias_maps_to_vip(self):
        entitlement = parse_product_metadata({"tier": "premium_vip", "total_lvl_ups": "10"})

        assert entitlement.tier == UserTier.VIP
        assert entitlement.sessions_to_credit == 10

    def test_explicit_tier_without_session_count(self):
        entitlement = parse_product_metadata({"tier": "vip"})

        assert entitlement.sessions_to_credit == 0

    def test_basic_course_with_addon_sessions(self):
        entitlement = parse_product_metadata(
            {"course_type": "basic_course", "includes_lvl_ups": "true"}
        )

        assert entitlement.tier == UserTier.BASIC
        assert entitlement.sessions_to_credit == 3
        assert entitlement.source == EntitlementSource.BASIC_COURSE

    def test_basic_course_addon_count_is_configurable(self):
        entitlement = parse_product_metadata(
            {"course_type": "basic_course", "includes_lvl_ups": "true"}, addon_sessions=5
        )

        assert entitlement.sessions_to_credit == 5

    def test_basic_course_without_addon(self):
        entitlement = parse_product_metadata({"course_type": "basic_course"})

        assert entitlement.sessions_to_credit == 0

    def test_explicit_tier_wins_over_course_type(self):
        entitlement = parse_product_metadata(
            {"tier": "premium", "course_type": "basic_course", "includes_lvl_ups": "true"}
        )

        assert entitlement.tier == UserTier.PREMIUM
        assert entitlement.source == EntitlementSource.EXPLICIT_TIER

    @pytest.mark.parametrize("metadata", [None, {}, {"foo": "bar"}, {"tier": "platinum"}])
    def test_unrecognized_metadata_falls_back_to_basic(self, metadata):
        entitlement = parse_product_metadata(metadata)

        assert entitlement.tier == UserTier.BASIC
        assert entitlement.sessions_to_credit == 0
        assert entitlement.payment_status == PaymentStatus.PAID
        assert not entitlement.recognized

    @pytest.mark.parametrize("raw", ["abc", "-2", ""])
    def test_malformed_session_count_is_zero(self, raw):
        entitlement = parse_product_metadata({"tier": "premium", "total_lvl_ups": raw})

        assert entitlement.sessions_to_credit == 0


class TestTierOrdering:
    @pytest.mark.parametrize(
        "current,new,expected",
        [
            ("basic", "premium", True),
            ("premium", "vip", True),
            ("basic", "vip", True),
            ("vip", "basic", False),
            ("premium", "premium", False),
            ("vip", "premium", False),
            (None, "basic", True),
            ("legacy", "basic", True),
        ],
    )
    def test_is_tier_upgrade(self, current, new, expected):
        assert is_tier_upgrade(current, new) is expected

    def test_parse_unknown_tier(self):
        assert UserTier.parse("gold") is None
        assert UserTier.parse(None) is None
        assert UserTier.parse("vip") is UserTier.VIP

    def test_higher_purchase_tier(self):
        assert higher_purchase_tier(None, "ai_premium") == "ai_premium"
        assert higher_purchase_tier("ai_premium", "textbook") == "textbook"
        assert higher_purchase_tier("basic", "textbook") == "basic"
        assert higher_purchase_tier("pro", "ai_premium") == "pro"


class TestCheckoutSession:
    def _event(self, **obj) -> WebhookEvent:
        return WebhookEvent.from_stripe_payload(
            {"id": "evt_1", "type": "checkout.session.completed", "data": {"object": obj}}
        )

    def test_from_event_normalizes_email(self):
        session = CheckoutSession.from_event(
            self._event(
                id="cs_1",
                customer_details={"email": "  Buyer@Example.COM ", "name": "Jamie"},
                amount_total=2999,
                currency="usd",
                payment_intent="pi_1",
            )
        )

        assert session.customer_email == "buyer@example.com"
        assert session.customer_name == "Jamie"
        assert session.amount_paid == Decimal("29.99")

    def test_falls_back_to_customer_email(self):
        session = CheckoutSession.from_event(self._event(id="cs_1", customer_email="a@b.co"))

        assert session.customer_email == "a@b.co"

    def test_idempotency_key_prefers_payment_intent(self):
        with_intent = CheckoutSession.from_event(self._event(id="cs_1", payment_intent="pi_9"))
        without_intent = CheckoutSession.from_event(self._event(id="cs_2", payment_intent=None))

        assert with_intent.idempotency_key == "pi_9"
        assert without_intent.idempotency_key == "cs_2"

    def test_expanded_payment_intent(self):
        session = CheckoutSession.from_event(
            self._event(id="cs_1", payment_intent={"id": "pi_expanded"})
        )

        assert session.payment_intent == "pi_expanded"

    def test_event_data_is_read_only(self):
        event = self._event(id="cs_1")

        with pytest.raises(TypeError):
            event.data["id"] = "cs_other"

    def test_event_requires_id_and_type(self):
        with pytest.raises(ValueError):
            WebhookEvent.from_stripe_payload({"type": "checkout.session.completed"})


class TestReturnState:
    def test_parses_json_state(self):
        state = ReturnState.parse(
            json.dumps({"userId": "u1", "userEmail": "a@b.co", "sessionId": "demo1"})
        )

        assert state == ReturnState(user_id="u1", user_email="a@b.co", session_id="demo1")

    @pytest.mark.parametrize("raw", [None, "", "not-json", "[1, 2]"])
    def test_invalid_state_is_empty(self, raw):
        assert ReturnState.parse(raw) == ReturnState()
