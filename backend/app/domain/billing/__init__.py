# Billing module for Ad Packages API
from app.domain.billing.interfaces import (
    IPlanRepository,
    ISubscriptionRepository,
    IPaymentRepository,
    GatewayAdapter,
)
from app.domain.billing.plan_resolver import PlanResolver
from app.domain.billing.ledger import SubscriptionLedger
from app.domain.billing.orchestrator import PurchaseOrchestrator
from app.domain.billing.packages import PackageService, CurrentPackage

__all__ = [
    "IPlanRepository",
    "ISubscriptionRepository",
    "IPaymentRepository",
    "GatewayAdapter",
    "PlanResolver",
    "SubscriptionLedger",
    "PurchaseOrchestrator",
    "PackageService",
    "CurrentPackage",
]
