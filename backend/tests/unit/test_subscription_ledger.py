"""
Unit tests for SubscriptionLedger.

Creation, in-place plan switches, same-type rejection and cancellation.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.billing import SubscriptionLedger
from app.domain.payment import PaymentMethod
from app.domain.subscription import SubscriptionStatus
from app.infrastructure.exceptions import (
    NoActiveSubscriptionError,
    PackageAlreadyActiveError,
)


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_ledger(subscription_repo, plan_repo):
    return SubscriptionLedger(subscription_repo, plan_repo, clock=lambda: NOW)


class TestApplyPurchase:

    @pytest.mark.asyncio
    async def test_creates_subscription_when_none_active(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")

        sub = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD, "tx_1")

        assert sub.id is not None
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.plan_id == starter.id
        assert sub.amount == Decimal("29.9")
        assert sub.start_date == NOW
        assert sub.end_date == NOW + timedelta(days=30)
        assert sub.transaction_id == "tx_1"
        assert sub.auto_renew is True
        assert sub.notes == "Package: Starter, Days: 30"
        assert len(subscription_repo.rows) == 1

    @pytest.mark.asyncio
    async def test_upgrade_overwrites_in_place(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")
        professional = await resolver.resolve("professional")

        original = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD, "tx_1")
        upgraded = await fixed_ledger.apply_purchase("user-1", professional, PaymentMethod.CRYPTO, "tx_2")

        assert upgraded.id == original.id
        assert upgraded.plan_id == professional.id
        assert upgraded.amount == Decimal("79.9")
        assert upgraded.payment_method == PaymentMethod.CRYPTO
        assert upgraded.transaction_id == "tx_2"
        assert upgraded.notes == "Plan Type: professional, Package: Professional, Days: 30"
        assert len(subscription_repo.rows) == 1

    @pytest.mark.asyncio
    async def test_downgrade_is_allowed(self, fixed_ledger, resolver):
        enterprise = await resolver.resolve("enterprise")
        starter = await resolver.resolve("starter")

        await fixed_ledger.apply_purchase("user-1", enterprise, PaymentMethod.CARD)
        switched = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)

        assert switched.plan_id == starter.id

    @pytest.mark.asyncio
    async def test_same_type_is_rejected_without_writes(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")
        original = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD, "tx_1")

        with pytest.raises(PackageAlreadyActiveError) as exc_info:
            await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.WALLET, "tx_2")

        assert "You already have an active Starter package" in exc_info.value.message
        assert exc_info.value.current_package == {
            "name": "Starter",
            "type": "starter",
            "price": Decimal("29.90"),
            "end_date": NOW + timedelta(days=30),
        }
        assert subscription_repo.rows[original.id] == original

    @pytest.mark.asyncio
    async def test_users_are_independent(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")

        await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)
        await fixed_ledger.apply_purchase("user-2", starter, PaymentMethod.CARD)

        assert len(subscription_repo.active_for("user-1")) == 1
        assert len(subscription_repo.active_for("user-2")) == 1

    @pytest.mark.asyncio
    async def test_concurrent_purchases_leave_one_active_row(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")
        professional = await resolver.resolve("professional")
        enterprise = await resolver.resolve("enterprise")

        results = await asyncio.gather(
            *[
                fixed_ledger.apply_purchase("user-1", plan, PaymentMethod.CARD)
                for plan in (starter, professional, enterprise)
            ],
            return_exceptions=True,
        )

        assert not any(isinstance(r, Exception) for r in results)
        assert len(subscription_repo.active_for("user-1")) == 1


class TestEnsureNotAlreadyActive:

    @pytest.mark.asyncio
    async def test_passes_without_subscription(self, fixed_ledger, resolver):
        starter = await resolver.resolve("starter")
        await fixed_ledger.ensure_not_already_active("user-1", starter)

    @pytest.mark.asyncio
    async def test_passes_for_different_type(self, fixed_ledger, resolver):
        starter = await resolver.resolve("starter")
        professional = await resolver.resolve("professional")
        await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)

        await fixed_ledger.ensure_not_already_active("user-1", professional)

    @pytest.mark.asyncio
    async def test_raises_for_same_type(self, fixed_ledger, resolver):
        starter = await resolver.resolve("starter")
        await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)

        with pytest.raises(PackageAlreadyActiveError):
            await fixed_ledger.ensure_not_already_active("user-1", starter)


class TestCancel:

    @pytest.mark.asyncio
    async def test_cancels_active_subscription(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")
        created = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)

        cancelled = await fixed_ledger.cancel("user-1")

        assert cancelled.id == created.id
        assert cancelled.status == SubscriptionStatus.CANCELLED
        assert cancelled.auto_renew is False
        assert cancelled.notes == f"Cancelled by user on {NOW.isoformat()}"
        assert subscription_repo.active_for("user-1") == []

    @pytest.mark.asyncio
    async def test_cancel_without_subscription(self, fixed_ledger):
        with pytest.raises(NoActiveSubscriptionError):
            await fixed_ledger.cancel("user-1")

    @pytest.mark.asyncio
    async def test_purchase_after_cancel_creates_new_row(self, fixed_ledger, resolver, subscription_repo):
        starter = await resolver.resolve("starter")
        first = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)
        await fixed_ledger.cancel("user-1")

        second = await fixed_ledger.apply_purchase("user-1", starter, PaymentMethod.CARD)

        assert second.id != first.id
        assert len(subscription_repo.rows) == 2
        assert len(subscription_repo.active_for("user-1")) == 1
