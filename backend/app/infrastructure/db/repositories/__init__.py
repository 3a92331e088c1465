"""
Repository Layer for Ad Packages API

Exports all repository classes for dependency injection.
"""

from app.infrastructure.db.repositories.plan_repository import PlanRepository
from app.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from app.infrastructure.db.repositories.payment_repository import PaymentRepository


__all__ = [
    "PlanRepository",
    "SubscriptionRepository",
    "PaymentRepository",
]
