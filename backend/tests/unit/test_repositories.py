"""
Unit tests for repository behaviour the webhook handlers depend on.
"""

from decimal import Decimal

import pytest

from infrastructure.database.models import Lead, Purchase, User
from infrastructure.repositories import LeadRepository, PurchaseRepository, UserRepository


class TestUserRepository:
    async def test_get_or_create_creates_once(self, db_session):
        repo = UserRepository(db_session)

        first, created = await repo.get_or_create("New@Example.com", full_name="New")
        second, created_again = await repo.get_or_create("new@example.com")

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert first.email == "new@example.com"

    async def test_find_by_email_is_case_insensitive(self, seed, db_session):
        await seed(User(email="mixed@example.com"))
        repo = UserRepository(db_session)

        assert await repo.find_by_email(" Mixed@Example.com ") is not None

    async def test_increments_are_additive(self, seed, db_session):
        user = User(email="points@example.com", bonus_points=10)
        await seed(user)
        repo = UserRepository(db_session)
        loaded = await repo.find_by_id(user.id)

        await repo.add_bonus_points(loaded, 100)
        await repo.add_bonus_points(loaded, 50)
        await repo.add_ai_credits(loaded, 30, "sonnet")
        await repo.record_spend(loaded, Decimal("19.99"), "ai_premium")

        assert loaded.bonus_points == 160
        assert loaded.ai_credits == 30
        assert loaded.ai_model_tier == "sonnet"
        assert loaded.total_spent == Decimal("19.99")
        assert loaded.highest_tier_purchased == "ai_premium"

    async def test_count_and_delete(self, seed, db_session):
        user = User(email="gone@example.com")
        await seed(user)
        repo = UserRepository(db_session)

        assert await repo.count(email="gone@example.com") == 1
        assert await repo.delete(user.id) is True
        assert await repo.delete(user.id) is False
        assert await repo.count() == 0


class TestLeadRepository:
    async def test_conversion_keeps_first_timestamp(self, seed, db_session):
        await seed(Lead(email="lead@example.com"))
        repo = LeadRepository(db_session)
        lead = await repo.find_by_email("lead@example.com")

        await repo.mark_as_converted(lead)
        converted_at = lead.converted_at
        await repo.mark_as_converted(lead)

        assert lead.status == "converted"
        assert lead.is_converted
        assert lead.converted_at == converted_at


class TestPurchaseRepository:
    @pytest.fixture
    async def owner(self, seed) -> User:
        user = User(email="owner@example.com")
        await seed(user)
        return user

    async def test_record_once(self, db_session, owner):
        repo = PurchaseRepository(db_session)
        values = dict(
            user_id=owner.id,
            product_slug="textbook",
            idempotency_key="pi_1",
            amount_paid=Decimal("49"),
        )

        purchase, created = await repo.record_once(**values)
        again, created_again = await repo.record_once(**values)

        assert created is True
        assert created_again is False
        assert again.id == purchase.id
        assert await repo.count() == 1

    async def test_same_key_for_other_product_is_separate(self, db_session, owner):
        repo = PurchaseRepository(db_session)

        await repo.record_once(user_id=owner.id, product_slug="textbook", idempotency_key="pi_1")
        _, created = await repo.record_once(
            user_id=owner.id, product_slug="ai_premium", idempotency_key="pi_1"
        )

        assert created is True
        assert await repo.count() == 2
        assert isinstance(await repo.find_existing(owner.id, "ai_premium", "pi_1"), Purchase)
