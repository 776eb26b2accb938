"""
Email audit log model.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class EmailLog(Base, TimestampMixin):
    """One row per confirmation email send attempt, for support and auditing."""

    __tablename__ = "email_logs"

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
    demo_project_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("demo_projects.id", ondelete="SET NULL"),
        nullable=True,
    )
    email_type: Mapped[str] = mapped_column(String(50), nullable=False)
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_message_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    """Values: 'sent', 'failed'"""

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_email_logs_user", "user_id"),
        Index("ix_email_logs_type_status", "email_type", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<EmailLog(id={self.id}, email_type={self.email_type}, "
            f"recipient={self.recipient_email}, status={self.status})>"
        )
