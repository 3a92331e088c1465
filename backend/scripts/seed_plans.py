#!/usr/bin/env python3
"""
Seed Plans Script

Materializes the well-known plans (starter, professional, enterprise) so the
catalog is populated before the first purchase. Safe to run repeatedly.

Usage:
    python -m scripts.seed_plans
"""

import asyncio
import logging

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.domain.billing.plan_resolver import PlanResolver
from app.infrastructure.db.database import close_db, get_session_context, init_db
from app.infrastructure.db.repositories.plan_repository import PlanRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed_plans() -> list:
    """
    Materialize every well-known plan.

    Returns:
        The persisted plans
    """
    await init_db()

    async with get_session_context() as session:
        resolver = PlanResolver(PlanRepository(session))
        plans = await resolver.materialize_all()

    for plan in plans:
        logger.info(f"  {plan.type.value}: {plan.name} ({plan.price} / {plan.billing_cycle.value}) -> {plan.id}")

    return plans


async def main():
    print("\n=== Plan Seed Script ===")

    try:
        plans = await seed_plans()
    finally:
        await close_db()

    print("\n=== Seed Complete ===")
    print(f"Plans available: {len(plans)}")


if __name__ == "__main__":
    asyncio.run(main())
