"""
Product catalog and purchase ledger models.
"""

from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.domain.purchase import PurchaseStatus

from .base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    """Catalog entry for a one-off digital product."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    total_purchases: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug={self.slug})>"


class Purchase(Base, TimestampMixin):
    """Append-only purchase ledger.

    ``idempotency_key`` holds the Stripe payment intent id (or the checkout
    session id for $0 checkouts). The unique constraint is what makes a
    retried webhook unable to record the same payment twice.
    """

    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    product_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)
    stripe_session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    credits_granted: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=PurchaseStatus.COMPLETED.value,
        nullable=False,
    )
    access_granted: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    product: Mapped[Optional["Product"]] = relationship(
        "Product",
        foreign_keys=[product_id],
        lazy="joined",
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "product_slug",
            "idempotency_key",
            name="uq_purchases_user_product_idempotency",
        ),
        Index("ix_purchases_idempotency_key", "idempotency_key"),
    )

    def __repr__(self) -> str:
        return (
            f"<Purchase(id={self.id}, user_id={self.user_id}, "
            f"product_slug={self.product_slug}, key={self.idempotency_key})>"
        )
