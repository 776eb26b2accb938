"""
Lead database model.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from core.domain.lead import LeadStatus

from .base import Base, TimestampMixin


class Lead(Base, TimestampMixin):
    """Prospective customer captured by lead forms before payment."""

    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=LeadStatus.NEW.value,
        nullable=False,
    )
    """Values: 'new', 'contacted', 'converted', 'lost'"""

    converted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("ix_leads_status", "status"),)

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, email={self.email}, status={self.status})>"

    @property
    def is_converted(self) -> bool:
        return self.status == LeadStatus.CONVERTED.value
