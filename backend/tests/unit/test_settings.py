"""
Unit tests for Pydantic Settings configuration.

Tests settings defaults and gateway credential validation.
"""

import pytest
from pydantic import ValidationError

from app.config.settings import Settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_has_defaults(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)

        assert settings.payments_sandbox is True
        assert settings.subscription_term_days == 30
        assert settings.payment_currency == "USD"
        assert settings.gateway_timeout_seconds > 0
        assert settings.jwt_algorithm == "HS256"
        assert settings.database_url.startswith("postgresql+asyncpg://")

    def test_is_production_property(self):
        """is_production should follow the environment name."""
        assert Settings(_env_file=None, environment="production").is_production is True
        assert Settings(_env_file=None, environment="development").is_development is True

    def test_allowed_origins_includes_localhost(self):
        settings = Settings(_env_file=None)
        assert "http://localhost:3000" in settings.allowed_origins

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_SANDBOX", "false")
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")

        settings = Settings(_env_file=None)

        assert settings.payments_sandbox is False
        assert settings.stripe_secret_key == "sk_test_123"


class TestGatewayCredentials:

    def test_live_mode_without_credentials_fails(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, payments_sandbox=False)

    def test_live_mode_with_partial_paypal_credentials_fails(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, payments_sandbox=False, paypal_client_id="id")

    def test_live_mode_with_one_gateway(self):
        settings = Settings(_env_file=None, payments_sandbox=False, nowpayments_api_key="np")
        assert settings.nowpayments_api_key == "np"

    def test_sandbox_needs_no_credentials(self):
        settings = Settings(_env_file=None, payments_sandbox=True)
        assert settings.stripe_secret_key is None
