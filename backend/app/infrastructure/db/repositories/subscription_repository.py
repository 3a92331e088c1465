"""
Subscription Repository

Data access layer for subscription persistence.
Follows Repository pattern for Clean Architecture.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.domain.billing.interfaces import ISubscriptionRepository
from app.domain.payment import PaymentMethod
from app.domain.subscription import Subscription, SubscriptionStatus
from app.infrastructure.db.models.subscription import SubscriptionModel
from app.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)


class SubscriptionRepository(ISubscriptionRepository):
    """
    Repository for subscription data access.

    Implements CRUD operations with domain model mapping. Writes are flushed
    into the caller's transaction; the session owner commits.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    @asynccontextmanager
    async def user_lock(self, user_id: str) -> AsyncIterator[None]:
        """
        Transaction-scoped advisory lock on the user's subscriptions.

        Held until the surrounding transaction commits or rolls back.
        """
        await self._session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"subscriptions:{user_id}"},
        )
        yield

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_active_for_user(self, user_id: str) -> Optional[Subscription]:
        """
        Get the active subscription for a user.

        Args:
            user_id: Authenticated user ID

        Returns:
            Subscription domain model or None
        """
        statement = select(SubscriptionModel).where(
            SubscriptionModel.user_id == user_id,
            SubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
        )
        result = await self._session.execute(statement)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def create(self, subscription: Subscription) -> Subscription:
        """
        Create a new subscription.

        Args:
            subscription: Subscription domain model

        Returns:
            Created subscription with ID
        """
        model = self._to_model(subscription)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)

        logger.info(f"Created subscription {model.id} for user {model.user_id}")
        return self._to_domain(model)

    async def update(self, subscription: Subscription) -> Subscription:
        """
        Overwrite an existing subscription row.

        Args:
            subscription: Subscription with updated values

        Returns:
            Updated subscription
        """
        model = await self._session.get(SubscriptionModel, subscription.id)
        if not model:
            raise NotFoundError(
                f"Subscription {subscription.id} not found",
                operation="update",
                table="subscriptions",
            )

        model.plan_id = subscription.plan_id
        model.status = subscription.status.value
        model.start_date = subscription.start_date
        model.end_date = subscription.end_date
        model.amount = subscription.amount
        model.payment_method = subscription.payment_method.value
        model.transaction_id = subscription.transaction_id
        model.auto_renew = subscription.auto_renew
        model.notes = subscription.notes
        model.updated_at = subscription.updated_at or datetime.now(timezone.utc)

        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)

        logger.info(f"Updated subscription {model.id} for user {model.user_id}")
        return self._to_domain(model)

    # =========================================================================
    # Mapping Methods
    # =========================================================================

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        """Convert database model to domain entity."""
        return Subscription(
            id=model.id,
            user_id=model.user_id,
            plan_id=model.plan_id,
            status=SubscriptionStatus(model.status),
            start_date=model.start_date,
            end_date=model.end_date,
            amount=model.amount,
            payment_method=PaymentMethod(model.payment_method),
            transaction_id=model.transaction_id,
            auto_renew=model.auto_renew,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, domain: Subscription) -> SubscriptionModel:
        """Convert domain entity to database model."""
        model = SubscriptionModel(
            user_id=domain.user_id,
            plan_id=domain.plan_id,
            status=domain.status.value,
            start_date=domain.start_date,
            end_date=domain.end_date,
            amount=domain.amount,
            payment_method=domain.payment_method.value,
            transaction_id=domain.transaction_id,
            auto_renew=domain.auto_renew,
            notes=domain.notes,
        )
        if domain.id:
            model.id = domain.id
        return model
