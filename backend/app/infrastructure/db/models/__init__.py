"""
SQLModel ORM Models for Ad Packages API

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from app.infrastructure.db.models.base import (
    BaseModel,
    TimestampMixin,
    UUIDMixin,
)
from app.infrastructure.db.models.plan import PlanModel
from app.infrastructure.db.models.subscription import SubscriptionModel
from app.infrastructure.db.models.payment import PaymentModel


__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    # Billing
    "PlanModel",
    "SubscriptionModel",
    "PaymentModel",
]
