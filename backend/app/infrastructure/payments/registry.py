"""
Gateway Registry

Maps each payment method to its configured adapter.
"""

import logging
from typing import Dict, Mapping, Optional

import httpx

from app.config.settings import Settings, get_settings
from app.domain.billing.interfaces import GatewayAdapter
from app.domain.payment import PaymentMethod
from app.infrastructure.payments.card import CardGateway
from app.infrastructure.payments.crypto import CryptoGateway
from app.infrastructure.payments.mobile_money import MobileMoneyGateway
from app.infrastructure.payments.wallet import WalletGateway


logger = logging.getLogger(__name__)

GatewayRegistry = Mapping[PaymentMethod, GatewayAdapter]


def build_gateway_registry(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> GatewayRegistry:
    """
    Build adapters from settings.

    Sandbox mode registers every method. Live mode registers only the
    gateways whose credentials are configured.
    """
    sandbox = settings.payments_sandbox
    common = {
        "sandbox": sandbox,
        "http_client": http_client,
        "timeout": settings.gateway_timeout_seconds,
        "currency": settings.payment_currency,
        "app_url": settings.app_url,
    }

    registry: Dict[PaymentMethod, GatewayAdapter] = {}

    if sandbox or settings.stripe_secret_key:
        registry[PaymentMethod.CARD] = CardGateway(api_key=settings.stripe_secret_key, **common)

    if sandbox or (settings.paypal_client_id and settings.paypal_client_secret):
        registry[PaymentMethod.WALLET] = WalletGateway(
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
            base_url=settings.paypal_base_url,
            **common,
        )

    if sandbox or settings.flutterwave_secret_key:
        registry[PaymentMethod.MOBILE_MONEY] = MobileMoneyGateway(
            secret_key=settings.flutterwave_secret_key,
            base_url=settings.flutterwave_base_url,
            **common,
        )

    if sandbox or settings.nowpayments_api_key:
        registry[PaymentMethod.CRYPTO] = CryptoGateway(
            api_key=settings.nowpayments_api_key,
            use_sandbox_api=settings.nowpayments_sandbox,
            **common,
        )

    mode = "sandbox" if sandbox else "live"
    logger.info(f"Payment gateways ({mode}): {', '.join(m.value for m in registry)}")
    return registry


# Singleton instance
_gateway_registry: Optional[GatewayRegistry] = None


def get_gateway_registry() -> GatewayRegistry:
    """Get or create the gateway registry singleton."""
    global _gateway_registry
    if _gateway_registry is None:
        _gateway_registry = build_gateway_registry(get_settings())
    return _gateway_registry
