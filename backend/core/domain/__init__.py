# Domain Entities
# Pure business objects with no external dependencies
from .entitlement import Entitlement, EntitlementSource, parse_product_metadata
from .lead import LeadStatus
from .purchase import EmailStatus, EmailType, ProductSlug, PurchaseStatus
from .user import PaymentStatus, UserRole, UserTier, is_tier_upgrade
from .webhook import CheckoutSession, ReturnState, StripeEventType, WebhookEvent

__all__ = [
    "UserRole",
    "UserTier",
    "PaymentStatus",
    "is_tier_upgrade",
    "LeadStatus",
    "ProductSlug",
    "PurchaseStatus",
    "EmailType",
    "EmailStatus",
    "Entitlement",
    "EntitlementSource",
    "parse_product_metadata",
    "WebhookEvent",
    "CheckoutSession",
    "ReturnState",
    "StripeEventType",
]
