"""
Pytest configuration and shared fixtures for backend tests.
"""

import json
import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from typing import Any, AsyncGenerator, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path is set
from core.domain.webhook import StripeEventType, WebhookEvent
from core.interfaces.services import EmailResult
from infrastructure.config.settings import Settings
from infrastructure.database import build_session_factory, get_db
from infrastructure.database.models import Base
from services.webhooks import WebhookDependencies, WebhookRegistry, create_stripe_webhook_registry

# Database URL for testing (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with Stripe configured and alerts suppressed (non-production)."""
    return Settings(
        environment="testing",
        secret_key="test-secret-key-that-is-at-least-32-characters",
        stripe_secret_key="sk_test_1234567890abcdef",
        stripe_webhook_secret="whsec_test1234567890abcdef",
        resend_api_key=None,
        redis_url="",
        site_url="https://academy.test",
    )


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(db_engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and assertions; use ``refresh`` after handlers commit."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def seed(session_factory) -> Callable:
    """Persist entities in their own committed transaction."""

    async def _seed(*entities: Any) -> None:
        async with session_factory() as session:
            session.add_all(entities)
            await session.commit()

    return _seed


# ============================================================================
# Collaborator fakes
# ============================================================================


@pytest.fixture
def email_service() -> AsyncMock:
    service = AsyncMock()
    service.send_email.side_effect = lambda to, subject, html, **kwargs: EmailResult(
        id="email_123", to=to, subject=subject
    )
    return service


@pytest.fixture
def alerts() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def payments() -> MagicMock:
    provider = MagicMock()
    provider.list_line_items = AsyncMock(return_value=[])
    provider.retrieve_checkout_session = AsyncMock(return_value={})
    return provider


@pytest.fixture
def identity() -> MagicMock:
    admin = MagicMock()
    admin.create_credentials.return_value = "$2b$12$randomhashforcheckoutaccounts"
    admin.generate_password_reset_link.side_effect = (
        lambda user_id, email: f"https://academy.test/reset-password?token=reset-{user_id}"
    )
    return admin


@pytest.fixture
def deps(session_factory, payments, email_service, identity, alerts, test_settings) -> WebhookDependencies:
    return WebhookDependencies(
        session_factory=session_factory,
        payments=payments,
        email=email_service,
        identity=identity,
        alerts=alerts,
        settings=test_settings,
    )


@pytest.fixture
def registry(deps) -> WebhookRegistry:
    return create_stripe_webhook_registry(deps)


# ============================================================================
# Stripe event builders
# ============================================================================


@pytest.fixture
def line_items() -> Callable[..., list[dict[str, Any]]]:
    """Line items as returned with ``expand=["data.price.product"]``."""

    def _make(metadata: dict[str, str]) -> list[dict[str, Any]]:
        return [
            {
                "id": "li_test_1",
                "quantity": 1,
                "price": {"id": "price_test_1", "product": {"id": "prod_test_1", "metadata": metadata}},
            }
        ]

    return _make


@pytest.fixture
def make_checkout_event() -> Callable[..., WebhookEvent]:
    """Build checkout.session.completed events."""

    def _make(
        email: Optional[str] = "buyer@example.com",
        name: Optional[str] = "Jamie Buyer",
        metadata: Optional[dict[str, str]] = None,
        client_reference_id: Optional[dict[str, str]] = None,
        session_id: str = "cs_test_123",
        payment_intent: Optional[str] = "pi_test_123",
        amount_total: int = 49700,
        event_id: str = "evt_test_checkout",
    ) -> WebhookEvent:
        return WebhookEvent.from_stripe_payload(
            {
                "id": event_id,
                "type": StripeEventType.CHECKOUT_SESSION_COMPLETED,
                "data": {
                    "object": {
                        "id": session_id,
                        "object": "checkout.session",
                        "customer": "cus_test_123",
                        "customer_details": {"email": email, "name": name},
                        "amount_total": amount_total,
                        "currency": "usd",
                        "payment_intent": payment_intent,
                        "payment_status": "paid",
                        "metadata": metadata or {},
                        "client_reference_id": (
                            json.dumps(client_reference_id) if client_reference_id else None
                        ),
                    }
                },
            }
        )

    return _make


@pytest.fixture
def payment_intent_event() -> WebhookEvent:
    return WebhookEvent.from_stripe_payload(
        {
            "id": "evt_test_pi",
            "type": StripeEventType.PAYMENT_INTENT_SUCCEEDED,
            "data": {
                "object": {
                    "id": "pi_test_123",
                    "object": "payment_intent",
                    "amount": 49700,
                    "currency": "usd",
                    "customer": "cus_test_123",
                    "metadata": {"tier": "premium"},
                }
            },
        }
    )


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def app(session_factory, registry: WebhookRegistry, payments: MagicMock, test_settings: Settings):
    """Fresh app with webhook collaborators on app.state and the test database."""
    from main import create_app

    app = create_app(test_settings)
    app.state.payments = payments
    app.state.webhook_registry = registry

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Reset rate limiter state between tests to prevent cross-test 429s
    app.state.limiter.reset()
    return app


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

