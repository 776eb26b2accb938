"""
Student accounts.
"""

from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, Index, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from core.domain.user import PaymentStatus, UserRole, UserTier

from .base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Student account, created at signup or lazily by checkout fulfillment.

    ``email`` is stored lower-cased so lookups by Stripe's customer email are
    case-insensitive. ``tier`` only ever moves upward through webhooks.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    # Random hash for checkout-created accounts until the owner resets it
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default=UserRole.STUDENT.value, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    tier: Mapped[str] = mapped_column(String(20), default=UserTier.BASIC.value, nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.PENDING.value, nullable=False
    )
    highest_tier_purchased: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    total_spent: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)

    bonus_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ai_credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ai_model_tier: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    __table_args__ = (Index("ix_users_tier", "tier"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, tier={self.tier})>"
