"""
Subscription Ledger

Enforces at most one active subscription per user and decides, for a paid
purchase, whether to create a subscription, overwrite the active one in
place (plan switch), or reject a same-type repurchase.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from app.domain.billing.interfaces import IPlanRepository, ISubscriptionRepository
from app.domain.payment import PaymentMethod
from app.domain.plan import Plan
from app.domain.subscription import (
    SUBSCRIPTION_TERM_DAYS,
    Subscription,
    SubscriptionStatus,
    term_bounds,
)
from app.infrastructure.exceptions import (
    NoActiveSubscriptionError,
    PackageAlreadyActiveError,
)


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionLedger:
    """
    Sole writer of subscription rows.

    Every read-decide-write sequence runs inside the repository's per-user
    exclusive section.
    """

    def __init__(
        self,
        subscriptions: ISubscriptionRepository,
        plans: IPlanRepository,
        term_days: int = SUBSCRIPTION_TERM_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._subscriptions = subscriptions
        self._plans = plans
        self._term_days = term_days
        self._clock = clock

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_active(self, user_id: str) -> Optional[Subscription]:
        """The user's active subscription, if any."""
        return await self._subscriptions.get_active_for_user(user_id)

    async def ensure_not_already_active(self, user_id: str, plan: Plan) -> None:
        """
        Unlocked pre-check run before charging.

        Raises:
            PackageAlreadyActiveError: active subscription has the same plan type
        """
        existing = await self._subscriptions.get_active_for_user(user_id)
        if existing is not None:
            await self._reject_same_type(existing, plan)

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def apply_purchase(
        self,
        user_id: str,
        plan: Plan,
        payment_method: PaymentMethod,
        transaction_id: Optional[str] = None,
    ) -> Subscription:
        """
        Record a paid purchase of ``plan`` for ``user_id``.

        Raises:
            PackageAlreadyActiveError: active subscription has the same plan type
        """
        async with self._subscriptions.user_lock(user_id):
            existing = await self._subscriptions.get_active_for_user(user_id)
            start, end = term_bounds(self._clock(), self._term_days)

            if existing is None:
                subscription = Subscription(
                    user_id=user_id,
                    plan_id=plan.id,
                    status=SubscriptionStatus.ACTIVE,
                    start_date=start,
                    end_date=end,
                    amount=plan.price,
                    payment_method=payment_method,
                    transaction_id=transaction_id,
                    notes=f"Package: {plan.name}, Days: {self._term_days}",
                )
                created = await self._subscriptions.create(subscription)
                logger.info(f"Created subscription {created.id} ({plan.type.value}) for user {user_id}")
                return created

            await self._reject_same_type(existing, plan)

            previous_plan_id = existing.plan_id
            updated = existing.model_copy(update={
                "plan_id": plan.id,
                "status": SubscriptionStatus.ACTIVE,
                "start_date": start,
                "end_date": end,
                "amount": plan.price,
                "payment_method": payment_method,
                "transaction_id": transaction_id,
                "auto_renew": True,
                "notes": f"Plan Type: {plan.type.value}, Package: {plan.name}, Days: {self._term_days}",
                "updated_at": start,
            })
            saved = await self._subscriptions.update(updated)
            logger.info(
                f"Switched subscription {saved.id} for user {user_id} "
                f"from plan {previous_plan_id} to {plan.id}"
            )
            return saved

    async def cancel(self, user_id: str) -> Subscription:
        """
        Cancel the user's active subscription.

        Raises:
            NoActiveSubscriptionError: nothing to cancel
        """
        async with self._subscriptions.user_lock(user_id):
            existing = await self._subscriptions.get_active_for_user(user_id)
            if existing is None:
                raise NoActiveSubscriptionError(user_id)

            now = self._clock()
            cancelled = existing.model_copy(update={
                "status": SubscriptionStatus.CANCELLED,
                "auto_renew": False,
                "notes": f"Cancelled by user on {now.isoformat()}",
                "updated_at": now,
            })
            saved = await self._subscriptions.update(cancelled)
            logger.info(f"Cancelled subscription {saved.id} for user {user_id}")
            return saved

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _reject_same_type(self, existing: Subscription, plan: Plan) -> None:
        current_plan = await self._plans.get_by_id(existing.plan_id)
        if current_plan is None or current_plan.type != plan.type:
            return

        logger.info(f"User {existing.user_id} already holds an active {plan.type.value} package")
        raise PackageAlreadyActiveError(
            f"You already have an active {plan.name} package. You can only upgrade "
            f"to a higher package or wait for it to expire.",
            current_package=_package_summary(current_plan, existing),
        )


def _package_summary(plan: Plan, subscription: Subscription) -> Dict[str, Any]:
    return {
        "name": plan.name,
        "type": plan.type.value,
        "price": plan.price,
        "end_date": subscription.end_date,
    }
