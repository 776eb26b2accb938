"""User domain values: roles, tiers and payment status."""

from enum import StrEnum


class UserRole(StrEnum):
    """User roles in the system."""

    STUDENT = "student"
    ADMIN = "admin"


class UserTier(StrEnum):
    """Course access tier, ordered basic < premium < vip."""

    BASIC = "basic"
    PREMIUM = "premium"
    VIP = "vip"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]

    @classmethod
    def parse(cls, value: str | None) -> "UserTier | None":
        """Return the tier for ``value`` or None when it is not a known tier."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


TIER_RANK: dict[UserTier, int] = {
    UserTier.BASIC: 1,
    UserTier.PREMIUM: 2,
    UserTier.VIP: 3,
}


class PaymentStatus(StrEnum):
    """Payment status of a user account."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    TRIAL = "trial"


def tier_rank(value: str | None) -> int:
    """Rank of a stored tier string; unknown or empty tiers rank 0."""
    tier = UserTier.parse(value)
    return tier.rank if tier else 0


def is_tier_upgrade(current: str | None, new: str | None) -> bool:
    """True only when ``new`` ranks strictly above ``current``.

    Webhook-driven tier changes must never move a user downward.
    """
    return tier_rank(new) > tier_rank(current)
