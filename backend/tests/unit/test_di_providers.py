"""
Unit tests for Dependency Injection providers.

Validates that:
- The gateway registry reflects sandbox/live configuration
- get_gateway_registry returns a singleton
- Request-scoped providers share one session across repositories
"""

from unittest.mock import MagicMock, patch

import pytest

from app.config.settings import Settings
from app.domain.billing import PackageService, PurchaseOrchestrator
from app.domain.payment import PaymentMethod
from app.infrastructure.payments import registry as registry_module
from app.infrastructure.payments.registry import build_gateway_registry


class TestGatewayRegistry:

    def test_sandbox_registers_every_method(self):
        registry = build_gateway_registry(Settings(_env_file=None))

        assert set(registry) == set(PaymentMethod)
        assert all(gateway.sandbox for gateway in registry.values())

    def test_live_registers_configured_gateways_only(self):
        settings = Settings(
            _env_file=None,
            payments_sandbox=False,
            stripe_secret_key="sk_test_1",
            flutterwave_secret_key="FLWSECK_TEST",
        )

        registry = build_gateway_registry(settings)

        assert set(registry) == {PaymentMethod.CARD, PaymentMethod.MOBILE_MONEY}
        assert not any(gateway.sandbox for gateway in registry.values())

    def test_paypal_needs_id_and_secret(self):
        settings = Settings(
            _env_file=None,
            payments_sandbox=False,
            nowpayments_api_key="np",
            paypal_client_id="id",
        )

        registry = build_gateway_registry(settings)

        assert set(registry) == {PaymentMethod.CRYPTO}

    def test_registry_keys_match_adapter_methods(self):
        registry = build_gateway_registry(Settings(_env_file=None))
        for method, gateway in registry.items():
            assert gateway.method == method

    def test_get_gateway_registry_is_cached(self):
        registry_module._gateway_registry = None
        try:
            with patch.object(registry_module, "get_settings", return_value=Settings(_env_file=None)):
                first = registry_module.get_gateway_registry()
                second = registry_module.get_gateway_registry()
            assert first is second
        finally:
            registry_module._gateway_registry = None


class TestRequestScopedProviders:

    @pytest.mark.asyncio
    async def test_orchestrator_provider(self):
        from app.infrastructure.db.dependencies import get_purchase_orchestrator
        from app.infrastructure.db.repositories import (
            PaymentRepository,
            PlanRepository,
            SubscriptionRepository,
        )

        session = MagicMock()
        gen = get_purchase_orchestrator(
            plans=PlanRepository(session),
            subscriptions=SubscriptionRepository(session),
            payments=PaymentRepository(session),
            gateways=build_gateway_registry(Settings(_env_file=None)),
        )
        orchestrator = await gen.__anext__()

        assert isinstance(orchestrator, PurchaseOrchestrator)

    @pytest.mark.asyncio
    async def test_orchestrator_deadline_sits_above_adapter_timeout(self):
        from app.config.settings import get_settings
        from app.infrastructure.db.dependencies import get_purchase_orchestrator

        gen = get_purchase_orchestrator(
            plans=MagicMock(),
            subscriptions=MagicMock(),
            payments=MagicMock(),
            gateways={},
        )
        orchestrator = await gen.__anext__()

        assert orchestrator._gateway_timeout > get_settings().gateway_timeout_seconds

    @pytest.mark.asyncio
    async def test_package_service_provider(self):
        from app.infrastructure.db.dependencies import get_package_service
        from app.infrastructure.db.repositories import PlanRepository, SubscriptionRepository

        session = MagicMock()
        gen = get_package_service(
            plans=PlanRepository(session),
            subscriptions=SubscriptionRepository(session),
        )
        service = await gen.__anext__()

        assert isinstance(service, PackageService)
