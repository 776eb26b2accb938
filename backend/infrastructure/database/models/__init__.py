"""
SQLAlchemy database models.
"""

from .base import Base, TimestampMixin
from .checkout import CheckoutSessionRecord, DemoProject
from .email_log import EmailLog
from .lead import Lead
from .purchase import Product, Purchase
from .user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Lead",
    "Product",
    "Purchase",
    "EmailLog",
    "DemoProject",
    "CheckoutSessionRecord",
]
