"""
Plan Domain Models

Purchasable package definitions and the catalog of well-known plan slugs
("starter", "professional", "enterprise") that can be materialized on demand.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.payment import Money


class PlanType(str, Enum):
    """Plan families. At most one persisted plan per non-custom type."""
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"


class BillingCycle(str, Enum):
    """Advertised billing cycle of a plan."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Upgrade ordering; custom plans sit outside the ladder.
PLAN_HIERARCHY: Mapping[PlanType, int] = MappingProxyType({
    PlanType.STARTER: 1,
    PlanType.PROFESSIONAL: 2,
    PlanType.ENTERPRISE: 3,
})


# =============================================================================
# Domain Entities
# =============================================================================

class Plan(BaseModel):
    """Core plan domain entity."""
    id: Optional[UUID] = None
    type: PlanType
    name: str
    description: str = ""
    price: Money = Field(ge=0)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    original_price: Optional[Money] = None
    discount_percentage: int = 0
    features: list[str] = Field(default_factory=list)
    limitations: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_popular: bool = False
    max_accounts: int = 1
    daily_budget_cap: Optional[Money] = None  # None means unlimited
    has_unlimited_budget: bool = False
    has_team_collaboration: bool = False
    has_dedicated_consultant: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def tier_level(self) -> int:
        return PLAN_HIERARCHY.get(self.type, 0)


class PlanTemplate(BaseModel):
    """Static definition used to materialize a well-known plan."""
    type: PlanType
    name: str
    description: str
    price: Decimal
    billing_cycle: BillingCycle
    features: tuple[str, ...]
    limitations: tuple[str, ...] = ()
    is_popular: bool = False
    max_accounts: int
    daily_budget_cap: Optional[Decimal] = None
    has_unlimited_budget: bool = False
    has_team_collaboration: bool = False
    has_dedicated_consultant: bool = False

    model_config = ConfigDict(frozen=True)

    def to_plan(self) -> Plan:
        """Build an unsaved Plan from this template."""
        return Plan(
            type=self.type,
            name=self.name,
            description=self.description,
            price=self.price,
            billing_cycle=self.billing_cycle,
            features=list(self.features),
            limitations=list(self.limitations),
            is_active=True,
            is_popular=self.is_popular,
            max_accounts=self.max_accounts,
            daily_budget_cap=self.daily_budget_cap,
            has_unlimited_budget=self.has_unlimited_budget,
            has_team_collaboration=self.has_team_collaboration,
            has_dedicated_consultant=self.has_dedicated_consultant,
        )


# =============================================================================
# Well-known Plan Catalog
# =============================================================================

WELL_KNOWN_PLANS: Mapping[str, PlanTemplate] = MappingProxyType({
    "starter": PlanTemplate(
        type=PlanType.STARTER,
        name="Starter",
        description="For small businesses & startups looking for simple, AI-driven ad automation.",
        price=Decimal("29.90"),
        billing_cycle=BillingCycle.WEEKLY,
        features=(
            "1-Min Ad Setup",
            "Facebook Ads Management",
            "Google Ads Management",
            "24/7 Ad Campaign Optimization",
            "AI Market Research",
            "AI Budget Optimizer & Performance Forecasts",
            "AI Ad Copy & Image Generation",
            "Expert Ad Targeting Strategy",
            "Top-performing Audiences",
            "Live Data Insights",
            "Customer Support",
        ),
        limitations=(
            "Up to 2 Ad Accounts",
            "Daily Budget Cap: $500",
        ),
        max_accounts=2,
        daily_budget_cap=Decimal("500"),
    ),
    "professional": PlanTemplate(
        type=PlanType.PROFESSIONAL,
        name="Professional",
        description=(
            "For growing businesses that need advanced AI optimization "
            "and multi-platform management."
        ),
        price=Decimal("79.90"),
        billing_cycle=BillingCycle.WEEKLY,
        features=(
            "Everything in Starter",
            "Instagram Ads Management",
            "TikTok Ads Management",
            "Advanced AI Optimization",
            "A/B Testing Automation",
            "Competitor Analysis",
            "Advanced Targeting Options",
            "Custom Audience Creation",
            "Performance Forecasting",
            "Priority Support",
            "Up to 5 Ad Accounts",
            "Daily Budget Cap: $2,000",
        ),
        limitations=(
            "Up to 5 Ad Accounts",
            "Daily Budget Cap: $2,000",
        ),
        is_popular=True,
        max_accounts=5,
        daily_budget_cap=Decimal("2000"),
        has_team_collaboration=True,
    ),
    "enterprise": PlanTemplate(
        type=PlanType.ENTERPRISE,
        name="Enterprise",
        description=(
            "For large businesses and agencies that need unlimited access "
            "and dedicated support."
        ),
        price=Decimal("199.90"),
        billing_cycle=BillingCycle.WEEKLY,
        features=(
            "Everything in Professional",
            "Unlimited Ad Accounts",
            "Unlimited Budget",
            "White-label Solutions",
            "API Access",
            "Custom Integrations",
            "Dedicated Account Manager",
            "24/7 Phone Support",
            "Custom Reporting",
            "Team Collaboration Tools",
            "Advanced Analytics",
            "Priority Feature Requests",
        ),
        max_accounts=999,
        daily_budget_cap=None,
        has_unlimited_budget=True,
        has_team_collaboration=True,
        has_dedicated_consultant=True,
    ),
})
