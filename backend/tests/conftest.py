"""
Test configuration and fixtures for Ad Packages API.

Provides in-memory repositories and a scriptable gateway so purchase flows,
including concurrent ones, run without a database or payment provider.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.domain.billing import (
    GatewayAdapter,
    IPaymentRepository,
    IPlanRepository,
    ISubscriptionRepository,
    PackageService,
    PlanResolver,
    PurchaseOrchestrator,
    SubscriptionLedger,
)
from app.domain.payment import Payment, PaymentMethod
from app.domain.plan import Plan, PlanType
from app.domain.purchase import ChargeSucceeded, PaymentOutcome
from app.domain.subscription import Subscription, SubscriptionStatus
from app.infrastructure.exceptions import DuplicateError, NotFoundError


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# In-memory repositories
# =============================================================================

class InMemoryPlanRepository(IPlanRepository):
    """Plan store with the same per-type uniqueness as the plans table."""

    def __init__(self):
        self.rows: Dict[UUID, Plan] = {}

    def add(self, plan: Plan) -> Plan:
        stored = plan.model_copy(update={"id": plan.id or uuid4(), "created_at": _now()})
        self.rows[stored.id] = stored
        return stored

    def of_type(self, plan_type: str) -> List[Plan]:
        return [p for p in self.rows.values() if p.type.value == plan_type]

    async def get_by_id(self, plan_id: UUID) -> Optional[Plan]:
        await asyncio.sleep(0)
        return self.rows.get(plan_id)

    async def get_by_type(self, plan_type: str) -> Optional[Plan]:
        await asyncio.sleep(0)
        matches = self.of_type(plan_type)
        return matches[0] if matches else None

    async def get_by_type_or_name(self, value: str) -> Optional[Plan]:
        await asyncio.sleep(0)
        for plan in self.rows.values():
            if plan.type.value == value or plan.name == value:
                return plan
        return None

    async def create_if_absent(self, plan: Plan) -> Plan:
        await asyncio.sleep(0)
        if plan.type != PlanType.CUSTOM:
            existing = self.of_type(plan.type.value)
            if existing:
                return existing[0]
        return self.add(plan)

    async def list_active(self) -> List[Plan]:
        await asyncio.sleep(0)
        return sorted((p for p in self.rows.values() if p.is_active), key=lambda p: p.price)


class InMemorySubscriptionRepository(ISubscriptionRepository):
    """Subscription store enforcing one active row per user."""

    def __init__(self):
        self.rows: Dict[UUID, Subscription] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            yield

    def active_for(self, user_id: str) -> List[Subscription]:
        return [
            s for s in self.rows.values()
            if s.user_id == user_id and s.status == SubscriptionStatus.ACTIVE
        ]

    async def get_active_for_user(self, user_id: str) -> Optional[Subscription]:
        await asyncio.sleep(0)
        active = self.active_for(user_id)
        return active[0] if active else None

    async def create(self, subscription: Subscription) -> Subscription:
        await asyncio.sleep(0)
        if subscription.status == SubscriptionStatus.ACTIVE and self.active_for(subscription.user_id):
            raise DuplicateError("Active subscription already exists", table="subscriptions")
        stored = subscription.model_copy(update={
            "id": uuid4(),
            "created_at": _now(),
            "updated_at": _now(),
        })
        self.rows[stored.id] = stored
        return stored

    async def update(self, subscription: Subscription) -> Subscription:
        await asyncio.sleep(0)
        if subscription.id not in self.rows:
            raise NotFoundError("Subscription not found", table="subscriptions")
        self.rows[subscription.id] = subscription
        return subscription


class InMemoryPaymentRepository(IPaymentRepository):
    """Append-only payment store."""

    def __init__(self):
        self.rows: List[Payment] = []

    async def create(self, payment: Payment) -> Payment:
        await asyncio.sleep(0)
        stored = payment.model_copy(update={"id": uuid4(), "created_at": _now()})
        self.rows.append(stored)
        return stored


class FakeGateway(GatewayAdapter):
    """Gateway returning a scripted outcome, optionally after a delay."""

    def __init__(
        self,
        method: PaymentMethod = PaymentMethod.CARD,
        provider: str = "fakepay",
        outcome: Optional[PaymentOutcome] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.method = method
        self.provider = provider
        self.outcome = outcome or ChargeSucceeded(transaction_id="tx_1")
        self.delay = delay
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def attempt_charge(self, plan: Plan, payment_data: Dict[str, Any]) -> PaymentOutcome:
        self.calls.append({"plan": plan, "payment_data": payment_data})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.outcome


# =============================================================================
# Billing Fixtures
# =============================================================================

@pytest.fixture
def plan_repo():
    return InMemoryPlanRepository()


@pytest.fixture
def subscription_repo():
    return InMemorySubscriptionRepository()


@pytest.fixture
def payment_repo():
    return InMemoryPaymentRepository()


@pytest.fixture
def gateway_factory():
    """Build FakeGateway instances with a custom outcome or delay."""
    return FakeGateway


@pytest.fixture
def card_gateway():
    return FakeGateway()


@pytest.fixture
def resolver(plan_repo):
    return PlanResolver(plan_repo)


@pytest.fixture
def ledger(subscription_repo, plan_repo):
    return SubscriptionLedger(subscription_repo, plan_repo)


@pytest.fixture
def orchestrator(resolver, ledger, payment_repo, card_gateway):
    return PurchaseOrchestrator(
        resolver=resolver,
        ledger=ledger,
        payments=payment_repo,
        gateways={PaymentMethod.CARD: card_gateway},
    )


@pytest.fixture
def package_service(plan_repo, subscription_repo):
    return PackageService(plan_repo, subscription_repo)


@pytest.fixture
def custom_plan(plan_repo):
    """A persisted custom plan."""
    return plan_repo.add(Plan(
        type=PlanType.CUSTOM,
        name="Agency Bundle",
        price=Decimal("149.00"),
    ))


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application."""
    from app.main import app
    return app


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


@pytest.fixture
def api_client(app, orchestrator, package_service):
    """
    Test client wired to the in-memory billing fixtures.

    Authenticated as ``user-1``.
    """
    from app.api.dependencies import get_current_user_id, get_optional_user_id
    from app.infrastructure.db.dependencies import (
        get_package_service,
        get_purchase_orchestrator,
    )

    app.dependency_overrides[get_purchase_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_package_service] = lambda: package_service
    app.dependency_overrides[get_current_user_id] = lambda: "user-1"
    app.dependency_overrides[get_optional_user_id] = lambda: "user-1"

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
