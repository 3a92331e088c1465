"""
Payments Infrastructure Module

Gateway adapters for card, wallet, mobile money and crypto payments.
"""

from app.infrastructure.payments.base import BaseGateway
from app.infrastructure.payments.card import CardGateway
from app.infrastructure.payments.wallet import WalletGateway
from app.infrastructure.payments.mobile_money import MobileMoneyGateway
from app.infrastructure.payments.crypto import CryptoGateway
from app.infrastructure.payments.registry import (
    GatewayRegistry,
    build_gateway_registry,
    get_gateway_registry,
)

__all__ = [
    "BaseGateway",
    "CardGateway",
    "WalletGateway",
    "MobileMoneyGateway",
    "CryptoGateway",
    "GatewayRegistry",
    "build_gateway_registry",
    "get_gateway_registry",
]
