"""
Logging setup for the webhook service.

Development gets a readable one-line format; production emits one JSON
object per line so structured ``extra=`` fields (event ids, handler names,
timings) survive into the log pipeline. Every handler scrubs Stripe and
Resend credentials before a record is written.
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

REDACTED = "[REDACTED]"

# (pattern, replacement) applied to messages and string arguments
_CREDENTIAL_PATTERNS = [
    (re.compile(r"(sk|rk)_(live|test)_[a-zA-Z0-9]{10,}"), "[REDACTED_API_KEY]"),
    (re.compile(r"whsec_[a-zA-Z0-9]{10,}"), "[REDACTED_WEBHOOK_SECRET]"),
    (re.compile(r"re_[a-zA-Z0-9]{20,}"), "[REDACTED_API_KEY]"),
    (re.compile(r"(Authorization:\s*Bearer\s+)\S+", re.IGNORECASE), r"\1" + REDACTED),
    (re.compile(r'((?:api[_-]?key|password|secret)["\s:=]+)[^\s&"\']+', re.IGNORECASE), r"\1" + REDACTED),
]

# ``extra=`` keys whose values are replaced outright
SENSITIVE_FIELDS = frozenset(
    {"password", "token", "reset_link", "secret", "api_key", "authorization", "cookie"}
)

# Free-form ``extra=`` containers scrubbed key by key
NESTED_FIELDS = ("metadata", "context")

# Known ``extra=`` keys copied into JSON output
STRUCTURED_FIELDS = (
    # request
    "request_id", "method", "path", "status_code", "duration_ms",
    # webhook dispatch
    "event_id", "event_type", "handler", "session_id", "customer_email",
    "product_slug", "purchase_id", "user_id",
    # payment and security records
    "type", "operation", "status", "amount", "currency", "severity", "security_event",
    # storage
    "table", "cache_key", "error",
)


def scrub(text: str) -> str:
    for pattern, replacement in _CREDENTIAL_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def redact_fields(data: Any) -> Any:
    """Copy of *data* with sensitive keys masked and strings scrubbed, at any depth."""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_FIELDS else redact_fields(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(redact_fields(item) for item in data)
    if isinstance(data, str):
        return scrub(data)
    return data


class SensitiveDataFilter(logging.Filter):
    """Scrubs credentials from the message, its arguments and structured extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(scrub(a) if isinstance(a, str) else a for a in record.args)
        elif isinstance(record.args, dict):
            record.args = {k: scrub(v) if isinstance(v, str) else v for k, v in record.args.items()}

        for key in list(vars(record)):
            if key.lower() in SENSITIVE_FIELDS:
                setattr(record, key, REDACTED)
            elif key in NESTED_FIELDS:
                setattr(record, key, redact_fields(getattr(record, key)))
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            (key, getattr(record, key))
            for key in STRUCTURED_FIELDS + NESTED_FIELDS
            if hasattr(record, key)
        )
        # default=str covers datetimes, Decimals and anything else in extras
        return json.dumps(entry, default=str)


def setup_logging(json_output: bool = False, level: str = "INFO") -> None:
    """Replace root handlers with a single scrubbed stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JSONFormatter()
        if json_output
        else logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    handler.addFilter(SensitiveDataFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for noisy in ("sqlalchemy.engine", "httpx", "stripe"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


_payment_logger = logging.getLogger("payments")
_security_logger = logging.getLogger("security")


def log_payment(operation: str, status: str, amount: int, currency: str, **meta: Any) -> None:
    """Audit record for money movement; ``amount`` is in minor units as Stripe reports it."""
    _payment_logger.info(
        "Payment %s %s - %s %s",
        operation,
        status,
        amount,
        currency,
        extra={
            "type": "payment",
            "operation": operation,
            "status": status,
            "amount": amount,
            "currency": currency,
            "metadata": meta,
        },
    )


def log_security(event: str, severity: str, **meta: Any) -> None:
    """Audit record for account events; ``high`` and ``critical`` log at WARNING."""
    _security_logger.log(
        logging.WARNING if severity in ("high", "critical") else logging.INFO,
        "Security event: %s (%s)",
        event,
        severity,
        extra={"type": "security", "security_event": event, "severity": severity, "metadata": meta},
    )
