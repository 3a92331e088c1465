"""
Unit tests for the SQLModel repositories.

Uses a mocked AsyncSession to check model mapping and the statements the
repositories issue for locking and plan materialization.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.domain.payment import Payment, PaymentMethod
from app.domain.plan import WELL_KNOWN_PLANS, Plan, PlanType
from app.domain.subscription import Subscription, SubscriptionStatus
from app.infrastructure.db.models import PaymentModel, PlanModel, SubscriptionModel
from app.infrastructure.db.repositories import (
    PaymentRepository,
    PlanRepository,
    SubscriptionRepository,
)
from app.infrastructure.exceptions import NotFoundError


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.get = AsyncMock()
    return session


def scalar_result(model):
    result = MagicMock()
    result.scalars.return_value.first.return_value = model
    result.scalars.return_value.all.return_value = [model] if model else []
    return result


class TestPlanRepository:

    def test_mapping_round_trip(self, mock_session):
        repo = PlanRepository(mock_session)
        plan = WELL_KNOWN_PLANS["professional"].to_plan()

        model = repo._to_model(plan)
        model.created_at = NOW
        model.updated_at = NOW
        mapped = repo._to_domain(model)

        assert model.type == "professional"
        assert model.billing_cycle == "weekly"
        assert mapped.type == PlanType.PROFESSIONAL
        assert mapped.price == Decimal("79.90")
        assert mapped.features == plan.features
        assert mapped.has_team_collaboration is True

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, mock_session):
        mock_session.get.return_value = None
        repo = PlanRepository(mock_session)

        assert await repo.get_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_create_if_absent_upserts_then_reads_back(self, mock_session):
        repo = PlanRepository(mock_session)
        plan = WELL_KNOWN_PLANS["starter"].to_plan()
        stored = repo._to_model(plan)

        insert_result = MagicMock(rowcount=0)
        mock_session.execute.side_effect = [insert_result, scalar_result(stored)]

        created = await repo.create_if_absent(plan)

        assert created.id == stored.id
        insert_stmt = mock_session.execute.call_args_list[0].args[0]
        compiled = str(insert_stmt.compile(dialect=_postgres_dialect()))
        assert "ON CONFLICT (type)" in compiled
        assert "DO NOTHING" in compiled
        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_plans_are_inserted(self, mock_session):
        repo = PlanRepository(mock_session)
        plan = Plan(type=PlanType.CUSTOM, name="Agency", price=Decimal("10"))

        created = await repo.create_if_absent(plan)

        assert created.type == PlanType.CUSTOM
        mock_session.add.assert_called_once()
        mock_session.execute.assert_not_called()


class TestSubscriptionRepository:

    def _subscription(self, **overrides) -> Subscription:
        values = dict(
            user_id="user-1",
            plan_id=uuid4(),
            status=SubscriptionStatus.ACTIVE,
            start_date=NOW,
            end_date=NOW + timedelta(days=30),
            amount=Decimal("29.90"),
            payment_method=PaymentMethod.CARD,
            transaction_id="tx_1",
        )
        values.update(overrides)
        return Subscription(**values)

    @pytest.mark.asyncio
    async def test_user_lock_takes_advisory_lock(self, mock_session):
        repo = SubscriptionRepository(mock_session)

        async with repo.user_lock("user-1"):
            pass

        statement, params = mock_session.execute.call_args.args
        assert "pg_advisory_xact_lock(hashtext(:key))" in str(statement)
        assert params == {"key": "subscriptions:user-1"}

    @pytest.mark.asyncio
    async def test_create_maps_fields(self, mock_session):
        repo = SubscriptionRepository(mock_session)

        created = await repo.create(self._subscription())

        added = mock_session.add.call_args.args[0]
        assert isinstance(added, SubscriptionModel)
        assert added.status == "active"
        assert added.payment_method == "card"
        assert created.status == SubscriptionStatus.ACTIVE
        assert created.amount == Decimal("29.90")

    @pytest.mark.asyncio
    async def test_update_overwrites_row(self, mock_session):
        repo = SubscriptionRepository(mock_session)
        existing = repo._to_model(self._subscription())
        mock_session.get.return_value = existing
        new_plan = uuid4()

        updated = await repo.update(self._subscription(
            id=existing.id,
            plan_id=new_plan,
            amount=Decimal("79.90"),
            payment_method=PaymentMethod.WALLET,
            updated_at=NOW,
        ))

        assert existing.plan_id == new_plan
        assert existing.payment_method == "wallet"
        assert updated.id == existing.id
        assert updated.amount == Decimal("79.90")

    @pytest.mark.asyncio
    async def test_update_missing_row(self, mock_session):
        mock_session.get.return_value = None
        repo = SubscriptionRepository(mock_session)

        with pytest.raises(NotFoundError):
            await repo.update(self._subscription(id=uuid4()))

    @pytest.mark.asyncio
    async def test_get_active_for_user(self, mock_session):
        repo = SubscriptionRepository(mock_session)
        model = repo._to_model(self._subscription())
        mock_session.execute.return_value = scalar_result(model)

        active = await repo.get_active_for_user("user-1")

        assert active.id == model.id
        assert active.status == SubscriptionStatus.ACTIVE


class TestPaymentRepository:

    @pytest.mark.asyncio
    async def test_metadata_is_stored_in_metadata_column(self, mock_session):
        repo = PaymentRepository(mock_session)

        created = await repo.create(Payment(
            user_id="user-1",
            method=PaymentMethod.CRYPTO,
            amount=Decimal("199.90"),
            description="Package Purchase: Enterprise",
            transaction_id="nowpayments_1",
            metadata={"packageType": "enterprise"},
        ))

        added = mock_session.add.call_args.args[0]
        assert isinstance(added, PaymentModel)
        assert added.payment_metadata == {"packageType": "enterprise"}
        assert created.metadata == {"packageType": "enterprise"}
        assert created.method == PaymentMethod.CRYPTO


def test_partial_unique_indexes_declared():
    plan_indexes = {index.name: index for index in PlanModel.__table__.indexes}
    subscription_indexes = {index.name: index for index in SubscriptionModel.__table__.indexes}

    assert plan_indexes["uq_plans_well_known_type"].unique is True
    assert subscription_indexes["uq_subscriptions_user_active"].unique is True


def _postgres_dialect():
    from sqlalchemy.dialects import postgresql
    return postgresql.dialect()
