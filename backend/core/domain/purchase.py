"""Purchase and email-log domain values."""

from enum import StrEnum


class ProductSlug(StrEnum):
    """Purchase ledger slugs; all but ``COURSE`` have dedicated checkout handlers."""

    COURSE = "course"
    AI_PREMIUM = "ai_premium"
    TEXTBOOK = "textbook"
    ARCHITECTURE_TOOLKIT = "architecture-mastery-toolkit"


class PurchaseStatus(StrEnum):
    COMPLETED = "completed"
    REFUNDED = "refunded"


class EmailType(StrEnum):
    PAYMENT_CONFIRMATION = "payment_confirmation"
    AI_PREMIUM_PURCHASE = "ai_premium_purchase"
    TEXTBOOK_PURCHASE = "textbook_purchase"
    TOOLKIT_PURCHASE = "toolkit_purchase"


class EmailStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"


# Ordering for users.highest_tier_purchased, lowest first
PURCHASE_TIER_ORDER = ("ai_premium", "textbook", "basic", "mid", "pro")


def higher_purchase_tier(current: str | None, candidate: str) -> str:
    """Return whichever of ``current`` and ``candidate`` ranks higher."""
    def _index(value: str | None) -> int:
        return PURCHASE_TIER_ORDER.index(value) if value in PURCHASE_TIER_ORDER else -1

    return candidate if _index(candidate) > _index(current) else (current or candidate)
