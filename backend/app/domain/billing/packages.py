"""
Package Queries

Read-side views over plans and subscriptions: the plan catalog, the user's
current package and the plans they can upgrade to.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional

from app.domain.billing.interfaces import IPlanRepository, ISubscriptionRepository
from app.domain.plan import WELL_KNOWN_PLANS, Plan, PlanTemplate
from app.domain.subscription import Subscription, days_remaining


@dataclass
class CurrentPackage:
    """Active subscription joined with its plan."""
    plan: Plan
    subscription: Subscription
    days_remaining: int
    is_expired: bool


class PackageService:
    """Read-only package queries."""

    def __init__(
        self,
        plans: IPlanRepository,
        subscriptions: ISubscriptionRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        catalog: Mapping[str, PlanTemplate] = WELL_KNOWN_PLANS,
    ):
        self._plans = plans
        self._subscriptions = subscriptions
        self._clock = clock
        self._catalog = catalog

    async def list_plans(self) -> List[Plan]:
        """
        Active plans, cheapest first.

        Before any plan is persisted the well-known catalog is listed instead;
        those plans have no id yet and are created on first purchase.
        """
        plans = await self._plans.list_active()
        if plans:
            return plans
        return sorted((t.to_plan() for t in self._catalog.values()), key=lambda p: p.price)

    async def current_package(self, user_id: str) -> Optional[CurrentPackage]:
        """
        The user's active package.

        Returns None when there is no active subscription or its plan is gone.
        Expiry is reported, not enforced.
        """
        subscription = await self._subscriptions.get_active_for_user(user_id)
        if subscription is None:
            return None

        plan = await self._plans.get_by_id(subscription.plan_id)
        if plan is None:
            return None

        remaining = days_remaining(subscription.end_date, self._clock())
        return CurrentPackage(
            plan=plan,
            subscription=subscription,
            days_remaining=max(0, remaining),
            is_expired=remaining <= 0,
        )

    async def available_upgrades(self, user_id: str) -> tuple[List[Plan], Optional[Plan]]:
        """
        Active plans above the user's current tier.

        Returns:
            (upgrade candidates, current plan or None)
        """
        plans = await self.list_plans()
        subscription = await self._subscriptions.get_active_for_user(user_id)
        if subscription is None:
            return plans, None

        current = await self._plans.get_by_id(subscription.plan_id)
        if current is None:
            return plans, None

        return [p for p in plans if p.tier_level > current.tier_level], current
