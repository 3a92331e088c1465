"""
Plan Resolver

Turns a caller-supplied package identifier into a persisted Plan.
Accepts a plan UUID, a well-known slug (materialized on first use),
or a raw plan type/name.
"""

import logging
import re
from typing import Mapping
from uuid import UUID

from app.domain.billing.interfaces import IPlanRepository
from app.domain.plan import Plan, PlanTemplate, WELL_KNOWN_PLANS
from app.infrastructure.exceptions import PlanNotFoundError


logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class PlanResolver:
    """
    Resolves package identifiers to plans.

    The slug catalog is injected so it can be swapped in tests without
    touching orchestration logic.
    """

    def __init__(
        self,
        plans: IPlanRepository,
        catalog: Mapping[str, PlanTemplate] = WELL_KNOWN_PLANS,
    ):
        self._plans = plans
        self._catalog = catalog

    async def resolve(self, package_id: str) -> Plan:
        """
        Resolve ``package_id`` to a plan.

        Raises:
            PlanNotFoundError: identifier matches no plan and no known slug
        """
        if UUID_PATTERN.match(package_id):
            plan = await self._plans.get_by_id(UUID(package_id))
            if plan is None:
                raise PlanNotFoundError(package_id)
            return plan

        template = self._catalog.get(package_id.lower())
        if template is not None:
            return await self.materialize(template)

        plan = await self._plans.get_by_type_or_name(package_id)
        if plan is None:
            raise PlanNotFoundError(package_id)
        return plan

    async def materialize(self, template: PlanTemplate) -> Plan:
        """Return the stored plan for ``template.type``, creating it once."""
        existing = await self._plans.get_by_type(template.type.value)
        if existing is not None:
            return existing

        plan = await self._plans.create_if_absent(template.to_plan())
        logger.info(f"Materialized well-known plan {plan.type.value} as {plan.id}")
        return plan

    async def materialize_all(self) -> list[Plan]:
        """Materialize every plan in the catalog."""
        return [await self.materialize(template) for template in self._catalog.values()]
