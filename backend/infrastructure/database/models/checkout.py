"""
Demo builder project and Stripe checkout session tracking models.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class DemoProject(Base, TimestampMixin):
    """A demo-site builder session; AI premium purchases unlock it."""

    __tablename__ = "demo_projects"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    ai_premium_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ai_premium_payment_intent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ai_credits_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ai_model_used: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Data retention
    is_data_retained: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    data_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<DemoProject(id={self.id}, ai_premium_paid={self.ai_premium_paid})>"


class CheckoutSessionRecord(Base, TimestampMixin):
    """Local record of a Stripe checkout session created by the app."""

    __tablename__ = "stripe_checkout_sessions"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    session_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    product_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="open", nullable=False)
    """Values: 'open', 'completed', 'expired'"""

    def __repr__(self) -> str:
        return f"<CheckoutSessionRecord(session_id={self.session_id}, status={self.status})>"
