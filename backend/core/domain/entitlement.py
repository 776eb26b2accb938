"""Course entitlement parsing from Stripe product metadata.

Product metadata is the de facto contract between the Stripe catalog and
checkout fulfillment:

* ``tier`` (+ ``total_lvl_ups``): explicit tier purchase, ``premium_vip`` maps to ``vip``
* ``course_type == "basic_course"`` (+ ``includes_lvl_ups``): basic course
* anything else: unrecognized, fulfilled as basic with no sessions
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Mapping

from .user import PaymentStatus, UserTier

BASIC_COURSE_TYPE = "basic_course"
TIER_ALIASES = {"premium_vip": UserTier.VIP}


class EntitlementSource(StrEnum):
    """Which metadata branch produced an entitlement."""

    EXPLICIT_TIER = "explicit_tier"
    BASIC_COURSE = "basic_course"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Entitlement:
    """What a checkout grants: tier, LevelUp sessions and payment status."""

    tier: UserTier
    sessions_to_credit: int
    payment_status: PaymentStatus
    source: EntitlementSource
    raw_metadata: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def recognized(self) -> bool:
        return self.source is not EntitlementSource.UNRECOGNIZED


def _parse_count(value: str | None) -> int:
    try:
        return max(int(value), 0) if value is not None else 0
    except (TypeError, ValueError):
        return 0


def parse_product_metadata(
    metadata: Mapping[str, str] | None,
    addon_sessions: int = 3,
) -> Entitlement:
    """Map product metadata to an :class:`Entitlement`.

    An explicit ``tier`` wins over ``course_type``. An explicit tier value that
    is not a known tier is treated as unrecognized rather than stored verbatim.
    """
    metadata = dict(metadata or {})
    raw_tier = metadata.get("tier")

    if raw_tier:
        tier = TIER_ALIASES.get(raw_tier) or UserTier.parse(raw_tier)
        if tier is not None:
            return Entitlement(
                tier=tier,
                sessions_to_credit=_parse_count(metadata.get("total_lvl_ups")),
                payment_status=PaymentStatus.PAID,
                source=EntitlementSource.EXPLICIT_TIER,
                raw_metadata=metadata,
            )
    elif metadata.get("course_type") == BASIC_COURSE_TYPE:
        includes_sessions = metadata.get("includes_lvl_ups") == "true"
        return Entitlement(
            tier=UserTier.BASIC,
            sessions_to_credit=addon_sessions if includes_sessions else 0,
            payment_status=PaymentStatus.PAID,
            source=EntitlementSource.BASIC_COURSE,
            raw_metadata=metadata,
        )

    return Entitlement(
        tier=UserTier.BASIC,
        sessions_to_credit=0,
        payment_status=PaymentStatus.PAID,
        source=EntitlementSource.UNRECOGNIZED,
        raw_metadata=metadata,
    )
