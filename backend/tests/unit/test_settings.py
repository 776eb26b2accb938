"""Tests for environment-driven configuration."""

import pytest

from infrastructure.config.settings import Settings


def test_sync_postgres_urls_use_asyncpg():
    config = Settings(database_url="postgres://u:p@db:5432/academy")

    assert config.database_url == "postgresql+asyncpg://u:p@db:5432/academy"


def test_empty_secret_key_is_generated():
    assert len(Settings(secret_key="").secret_key) >= 32


def test_cors_origins_accept_json_and_csv():
    assert Settings(cors_origins='["https://a.test/"]').cors_origins_list == ["https://a.test"]
    assert Settings(cors_origins="https://a.test, https://b.test/").cors_origins_list == [
        "https://a.test",
        "https://b.test",
    ]


def test_stripe_needs_both_credentials():
    assert not Settings(stripe_secret_key="sk_test_x", stripe_webhook_secret=None).stripe_configured
    assert Settings(stripe_secret_key="sk_test_x", stripe_webhook_secret="whsec_x").stripe_configured


def test_production_lists_missing_credentials():
    config = Settings(
        environment="production",
        secret_key="x" * 40,
        stripe_secret_key="sk_live_x",
        stripe_webhook_secret=None,
        resend_api_key=None,
    )

    with pytest.raises(ValueError, match="STRIPE_WEBHOOK_SECRET, RESEND_API_KEY"):
        config.validate_production_secrets()


def test_development_skips_secret_checks():
    Settings(environment="development").validate_production_secrets()
