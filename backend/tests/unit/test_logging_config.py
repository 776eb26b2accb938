"""
Unit tests for log redaction and JSON formatting.
"""

import json
import logging

from infrastructure.logging_config import (
    REDACTED,
    JSONFormatter,
    SensitiveDataFilter,
    log_payment,
    redact_fields,
)


def make_record(msg: str, args: tuple = (), **extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSensitiveDataFilter:
    def test_redacts_stripe_keys_in_message(self):
        record = make_record("Using key sk_live_abcdefghijklmnop for request")

        SensitiveDataFilter().filter(record)

        assert "sk_live_" not in record.getMessage()
        assert "[REDACTED_API_KEY]" in record.getMessage()

    def test_redacts_webhook_secret_in_args(self):
        record = make_record("Webhook signing key %s", ("whsec_abcdefghijklmnop",))

        SensitiveDataFilter().filter(record)

        assert record.getMessage() == "Webhook signing key [REDACTED_WEBHOOK_SECRET]"

    def test_redacts_sensitive_extra_fields(self):
        record = make_record(
            "Created user",
            token="abc123",
            reset_link="https://academy.test/reset-password?token=abc",
            metadata={"email": "a@b.co", "password": "hunter2"},
        )

        SensitiveDataFilter().filter(record)

        assert record.token == REDACTED
        assert record.reset_link == REDACTED
        assert record.metadata == {"email": "a@b.co", "password": REDACTED}

    def test_leaves_ordinary_messages_alone(self):
        record = make_record("Processing checkout session %s", ("cs_test_123",))

        assert SensitiveDataFilter().filter(record) is True
        assert record.getMessage() == "Processing checkout session cs_test_123"


def test_redact_fields_nested():
    data = {"outer": [{"api_key": "x"}, {"ok": "sk_test_abcdefghijkl"}]}

    assert redact_fields(data) == {"outer": [{"api_key": REDACTED}, {"ok": "[REDACTED_API_KEY]"}]}


class TestJSONFormatter:
    def test_includes_structured_fields(self):
        record = make_record(
            "CheckoutCompletedHandler started",
            event_id="evt_1",
            event_type="checkout.session.completed",
            handler="CheckoutCompletedHandler",
            duration_ms=12.5,
        )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "CheckoutCompletedHandler started"
        assert entry["level"] == "INFO"
        assert entry["event_id"] == "evt_1"
        assert entry["handler"] == "CheckoutCompletedHandler"
        assert entry["duration_ms"] == 12.5
        assert "timestamp" in entry

    def test_non_serializable_values_fall_back_to_str(self):
        record = make_record("x", metadata={"obj": object()})

        entry = json.loads(JSONFormatter().format(record))

        assert entry["metadata"]["obj"].startswith("<object object")


def test_log_payment_emits_typed_record(caplog):
    caplog.set_level(logging.INFO, logger="payments")

    log_payment("charge", "succeeded", 49700, "usd", user_id="u1")

    record = caplog.records[-1]
    assert record.type == "payment"
    assert record.amount == 49700
    assert record.metadata == {"user_id": "u1"}
