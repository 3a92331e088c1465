"""
Plan Repository

Data access layer for plan persistence.
Well-known plans are materialized with INSERT ... ON CONFLICT DO NOTHING so
concurrent first purchases converge on a single row.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.domain.billing.interfaces import IPlanRepository
from app.domain.plan import BillingCycle, Plan, PlanType
from app.infrastructure.db.models.plan import PlanModel


logger = logging.getLogger(__name__)


class PlanRepository(IPlanRepository):
    """
    Repository for plan data access.

    Args:
        session: Async database session owned by the caller
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_by_id(self, plan_id: UUID) -> Optional[Plan]:
        model = await self._session.get(PlanModel, plan_id)
        return self._to_domain(model) if model else None

    async def get_by_type(self, plan_type: str) -> Optional[Plan]:
        statement = (
            select(PlanModel)
            .where(PlanModel.type == plan_type)
            .order_by(PlanModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(statement)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def get_by_type_or_name(self, value: str) -> Optional[Plan]:
        statement = (
            select(PlanModel)
            .where(or_(PlanModel.type == value, PlanModel.name == value))
            .order_by(PlanModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(statement)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def list_active(self) -> List[Plan]:
        statement = (
            select(PlanModel)
            .where(PlanModel.is_active == True)  # noqa: E712
            .order_by(PlanModel.price)
        )
        result = await self._session.execute(statement)
        return [self._to_domain(model) for model in result.scalars().all()]

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def create_if_absent(self, plan: Plan) -> Plan:
        """
        Insert a plan, or return the row another transaction already inserted.

        Custom plans carry no uniqueness and are always inserted.
        """
        model = self._to_model(plan)

        if plan.type == PlanType.CUSTOM:
            self._session.add(model)
            await self._session.flush()
            await self._session.refresh(model)
            return self._to_domain(model)

        stmt = pg_insert(PlanModel).values(**model.model_dump())
        stmt = stmt.on_conflict_do_nothing(
            index_elements=["type"],
            index_where=text("type <> 'custom'"),
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            logger.info(f"Plan {plan.type.value} was materialized concurrently, reusing it")

        stored = await self.get_by_type(plan.type.value)
        if stored is None:
            raise RuntimeError(f"Plan {plan.type.value} missing after upsert")
        return stored

    # =========================================================================
    # Mapping Methods
    # =========================================================================

    def _to_domain(self, model: PlanModel) -> Plan:
        """Convert database model to domain entity."""
        return Plan(
            id=model.id,
            type=PlanType(model.type),
            name=model.name,
            description=model.description or "",
            price=model.price,
            billing_cycle=BillingCycle(model.billing_cycle),
            original_price=model.original_price,
            discount_percentage=model.discount_percentage or 0,
            features=list(model.features or []),
            limitations=list(model.limitations or []),
            is_active=model.is_active,
            is_popular=model.is_popular,
            max_accounts=model.max_accounts,
            daily_budget_cap=model.daily_budget_cap,
            has_unlimited_budget=model.has_unlimited_budget,
            has_team_collaboration=model.has_team_collaboration,
            has_dedicated_consultant=model.has_dedicated_consultant,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, domain: Plan) -> PlanModel:
        """Convert domain entity to database model."""
        model = PlanModel(
            type=domain.type.value,
            name=domain.name,
            description=domain.description,
            price=domain.price,
            billing_cycle=domain.billing_cycle.value,
            original_price=domain.original_price,
            discount_percentage=domain.discount_percentage,
            features=list(domain.features),
            limitations=list(domain.limitations),
            is_active=domain.is_active,
            is_popular=domain.is_popular,
            max_accounts=domain.max_accounts,
            daily_budget_cap=domain.daily_budget_cap,
            has_unlimited_budget=domain.has_unlimited_budget,
            has_team_collaboration=domain.has_team_collaboration,
            has_dedicated_consultant=domain.has_dedicated_consultant,
        )
        if domain.id:
            model.id = domain.id
        return model
