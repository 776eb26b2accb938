"""
Collaborators injected into webhook handlers.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.interfaces.services import AlertNotifier, EmailService, IdentityAdmin, PaymentProvider
from infrastructure.cache import CacheService
from infrastructure.config.settings import Settings
from infrastructure.repositories import (
    CheckoutSessionRepository,
    DemoProjectRepository,
    EmailLogRepository,
    LeadRepository,
    ProductRepository,
    PurchaseRepository,
    UserRepository,
)


@dataclass
class Repositories:
    """Repositories sharing one session (one transaction)."""

    session: AsyncSession
    users: UserRepository
    leads: LeadRepository
    purchases: PurchaseRepository
    products: ProductRepository
    email_logs: EmailLogRepository
    demo_projects: DemoProjectRepository
    checkout_sessions: CheckoutSessionRepository


@dataclass
class WebhookDependencies:
    session_factory: async_sessionmaker[AsyncSession]
    payments: PaymentProvider
    email: EmailService
    identity: IdentityAdmin
    alerts: AlertNotifier
    settings: Settings
    cache: Optional[CacheService] = None

    def repositories(self, session: AsyncSession) -> Repositories:
        return Repositories(
            session=session,
            users=UserRepository(session, self.cache),
            leads=LeadRepository(session, self.cache),
            purchases=PurchaseRepository(session, self.cache),
            products=ProductRepository(session, self.cache),
            email_logs=EmailLogRepository(session, self.cache),
            demo_projects=DemoProjectRepository(session, self.cache),
            checkout_sessions=CheckoutSessionRepository(session, self.cache),
        )

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[Repositories]:
        """Repositories over a fresh session; commits on success, rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield self.repositories(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
