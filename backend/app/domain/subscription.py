"""
Subscription Domain Models

Domain models for subscription management following Clean Architecture.
Enums, DTOs, and domain entities for the subscription bounded context.
"""

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.payment import Money, Payment, PaymentMethod
from app.domain.plan import Plan


# Fixed term applied on every purchase, independent of the plan's billing cycle.
SUBSCRIPTION_TERM_DAYS = 30


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# =============================================================================
# Domain Entities
# =============================================================================

class Subscription(BaseModel):
    """Core subscription domain entity."""
    id: Optional[UUID] = None
    user_id: str
    plan_id: UUID
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    start_date: datetime
    end_date: datetime
    amount: Money
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    auto_renew: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def term_bounds(now: datetime, days: int = SUBSCRIPTION_TERM_DAYS) -> tuple[datetime, datetime]:
    """Start and end of a subscription term beginning at ``now``."""
    return now, now + timedelta(days=days)


def days_remaining(end_date: datetime, now: datetime) -> int:
    """Whole days left until ``end_date`` (rounded up, may be negative)."""
    return math.ceil((end_date - now).total_seconds() / 86400)


# =============================================================================
# Request/Response DTOs
# =============================================================================

class PurchaseRequest(BaseModel):
    """Request DTO for purchasing a package."""
    package_id: Optional[str] = Field(
        default=None,
        alias="packageId",
        description="Plan UUID, well-known slug, or plan type/name",
    )
    payment_method: Optional[str] = Field(
        default=None,
        alias="paymentMethod",
        description="card, wallet, mobile_money or crypto",
    )
    payment_data: dict[str, Any] = Field(default_factory=dict, alias="paymentData")

    model_config = ConfigDict(populate_by_name=True)


class CurrentPackageSummary(BaseModel):
    """The subscription that blocked a same-type purchase."""
    name: str
    type: str
    price: Money
    end_date: datetime = Field(serialization_alias="endDate")


class PurchaseResponse(BaseModel):
    """Response DTO for a package purchase."""
    success: bool
    message: str
    subscription: Optional[Subscription] = None
    payment: Optional[Payment] = None
    redirect_url: Optional[str] = Field(default=None, serialization_alias="redirectUrl")
    error: Optional[str] = None
    reason: Optional[str] = None
    current_package: Optional[CurrentPackageSummary] = Field(
        default=None, serialization_alias="currentPackage"
    )


class SubscriptionSummary(BaseModel):
    """Subscription part of the current-package view."""
    id: UUID
    status: SubscriptionStatus
    start_date: datetime
    end_date: datetime
    days_remaining: int
    is_expired: bool
    payment_method: PaymentMethod
    amount: Money


class CurrentPackageResponse(BaseModel):
    """Response DTO for the user's current package."""
    success: bool = True
    has_active_package: bool
    message: Optional[str] = None
    package: Optional[Plan] = None
    subscription: Optional[SubscriptionSummary] = None


class CancelResponse(BaseModel):
    """Response DTO for a cancellation."""
    success: bool = True
    message: str
    subscription: Subscription
    cancelled_at: datetime


class PlanListResponse(BaseModel):
    """Response DTO for plan listings (catalog and upgrades)."""
    plans: list[Plan]
    current_plan_type: Optional[str] = None
