"""
Billing Interfaces for Ad Packages API

Abstract persistence and gateway contracts consumed by the purchase core.
Follows Interface Segregation and Dependency Inversion principles: the
resolver, ledger and orchestrator only see these abstractions.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Dict, List, Optional
from uuid import UUID

from app.domain.payment import Payment, PaymentMethod
from app.domain.plan import Plan
from app.domain.purchase import PaymentOutcome
from app.domain.subscription import Subscription


class IPlanRepository(ABC):
    """Plan storage. Plans are shared, read-mostly reference data."""

    @abstractmethod
    async def get_by_id(self, plan_id: UUID) -> Optional[Plan]:
        """Get a plan by primary key."""
        pass

    @abstractmethod
    async def get_by_type(self, plan_type: str) -> Optional[Plan]:
        """Get the plan persisted for a well-known type."""
        pass

    @abstractmethod
    async def get_by_type_or_name(self, value: str) -> Optional[Plan]:
        """Get a plan whose type or name equals ``value`` exactly."""
        pass

    @abstractmethod
    async def create_if_absent(self, plan: Plan) -> Plan:
        """
        Insert ``plan`` unless a plan of the same type exists.

        Must converge under concurrency: every caller gets the single
        persisted row for that type, never an error or a duplicate.
        """
        pass

    @abstractmethod
    async def list_active(self) -> List[Plan]:
        """Active plans ordered by ascending price."""
        pass


class ISubscriptionRepository(ABC):
    """Subscription storage with a per-user exclusive section."""

    @abstractmethod
    def user_lock(self, user_id: str) -> AsyncContextManager[None]:
        """
        Exclusive section for one user's subscription rows.

        Two holders for the same user never overlap; holders for different
        users do not block each other.
        """
        pass

    @abstractmethod
    async def get_active_for_user(self, user_id: str) -> Optional[Subscription]:
        """The user's subscription with status=active, if any."""
        pass

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """Insert a new subscription and return it with its ID."""
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        """Overwrite an existing subscription row in place."""
        pass


class IPaymentRepository(ABC):
    """Append-only payment storage."""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """Insert a payment record."""
        pass


class GatewayAdapter(ABC):
    """
    One external payment provider behind a uniform charge contract.

    Implementations never raise for business failures: invalid payment data,
    declines and timeouts come back as ``ChargeFailed``. Unreachable
    providers raise ``GatewayUnavailableError``.
    """

    method: PaymentMethod
    provider: str

    @abstractmethod
    async def attempt_charge(self, plan: Plan, payment_data: Dict[str, Any]) -> PaymentOutcome:
        """Attempt to charge ``plan.price`` using ``payment_data``."""
        pass
