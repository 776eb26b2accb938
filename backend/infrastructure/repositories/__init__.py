"""Repositories over the async SQLAlchemy session."""

from .base import BaseRepository
from .checkout import CheckoutSessionRepository, DemoProjectRepository
from .email_log import EmailLogRepository
from .lead import LeadRepository
from .purchase import ProductRepository, PurchaseRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "LeadRepository",
    "PurchaseRepository",
    "ProductRepository",
    "EmailLogRepository",
    "DemoProjectRepository",
    "CheckoutSessionRepository",
]
