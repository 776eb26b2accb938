"""Webhook processing errors."""


class WebhookError(Exception):
    """Base exception for webhook processing failures."""

    pass


class EventTypeMismatchError(WebhookError):
    """An event was routed to a handler bound to a different event type."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Event type mismatch: expected {expected}, got {actual}")


class MissingCustomerDataError(WebhookError):
    """The event lacks the customer email or user id needed to fulfill it."""

    pass


class ProductNotFoundError(WebhookError):
    """The purchased product is not in the catalog."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Product not found: {slug}")
