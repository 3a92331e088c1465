"""
Dependency Injection Providers for Ad Packages API

Provides FastAPI dependencies for database sessions, repositories and the
billing services built on them. Everything resolved within one request
shares the request's session, so a purchase commits or rolls back as a unit.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import get_settings
from app.domain.billing import (
    PackageService,
    PlanResolver,
    PurchaseOrchestrator,
    SubscriptionLedger,
)
from app.infrastructure.db.database import get_session
from app.infrastructure.db.repositories import (
    PaymentRepository,
    PlanRepository,
    SubscriptionRepository,
)
from app.infrastructure.payments.registry import GatewayRegistry, get_gateway_registry


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Adapters bound their own provider calls by gateway_timeout_seconds; the
# orchestrator deadline sits above that and only catches a stuck adapter.
GATEWAY_DEADLINE_MARGIN_SECONDS = 5.0


async def get_plan_repository(
    session: SessionDep,
) -> AsyncGenerator[PlanRepository, None]:
    """
    Dependency provider for PlanRepository.

    Usage:
        @router.get("/packages")
        async def list_packages(
            repo: PlanRepository = Depends(get_plan_repository)
        ):
            ...
    """
    yield PlanRepository(session)


async def get_subscription_repository(
    session: SessionDep,
) -> AsyncGenerator[SubscriptionRepository, None]:
    """
    Dependency provider for SubscriptionRepository.
    """
    yield SubscriptionRepository(session)


async def get_payment_repository(
    session: SessionDep,
) -> AsyncGenerator[PaymentRepository, None]:
    """
    Dependency provider for PaymentRepository.
    """
    yield PaymentRepository(session)


# Type aliases for repository dependencies
PlanRepoDep = Annotated[PlanRepository, Depends(get_plan_repository)]
SubscriptionRepoDep = Annotated[SubscriptionRepository, Depends(get_subscription_repository)]
PaymentRepoDep = Annotated[PaymentRepository, Depends(get_payment_repository)]
GatewaysDep = Annotated[GatewayRegistry, Depends(get_gateway_registry)]


async def get_purchase_orchestrator(
    plans: PlanRepoDep,
    subscriptions: SubscriptionRepoDep,
    payments: PaymentRepoDep,
    gateways: GatewaysDep,
) -> AsyncGenerator[PurchaseOrchestrator, None]:
    """
    Dependency provider for PurchaseOrchestrator.
    """
    settings = get_settings()
    yield PurchaseOrchestrator(
        resolver=PlanResolver(plans),
        ledger=SubscriptionLedger(
            subscriptions,
            plans,
            term_days=settings.subscription_term_days,
        ),
        payments=payments,
        gateways=gateways,
        gateway_timeout=settings.gateway_timeout_seconds + GATEWAY_DEADLINE_MARGIN_SECONDS,
        currency=settings.payment_currency,
    )


async def get_package_service(
    plans: PlanRepoDep,
    subscriptions: SubscriptionRepoDep,
) -> AsyncGenerator[PackageService, None]:
    """
    Dependency provider for PackageService.
    """
    yield PackageService(plans, subscriptions)


PurchaseOrchestratorDep = Annotated[PurchaseOrchestrator, Depends(get_purchase_orchestrator)]
PackageServiceDep = Annotated[PackageService, Depends(get_package_service)]
