"""
Purchase Outcome Types

Tagged results exchanged between the gateway adapters, the purchase
orchestrator and its callers. Business failures travel as values; only
infrastructure failures are raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from app.domain.payment import Payment
from app.domain.subscription import Subscription


# =============================================================================
# Gateway charge outcome
# =============================================================================

@dataclass(frozen=True)
class ChargeSucceeded:
    """The provider accepted the charge (or issued a hosted checkout)."""
    transaction_id: str
    redirect_url: Optional[str] = None
    provider_payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChargeFailed:
    """The charge was rejected before or by the provider."""
    reason: str
    message: Optional[str] = None


PaymentOutcome = Union[ChargeSucceeded, ChargeFailed]

VALIDATION_FAILURE = "validation"
TIMEOUT_FAILURE = "timeout"
DECLINED_FAILURE = "declined"


# =============================================================================
# Purchase result
# =============================================================================

class PurchaseError(str, Enum):
    """Business error codes surfaced to callers."""
    INVALID_REQUEST = "InvalidRequest"
    PLAN_NOT_FOUND = "PlanNotFound"
    PACKAGE_ALREADY_ACTIVE = "PackageAlreadyActive"
    PAYMENT_FAILED = "PaymentFailed"


@dataclass
class PurchaseResult:
    """Result of one purchase attempt."""
    success: bool
    message: str
    subscription: Optional[Subscription] = None
    payment: Optional[Payment] = None
    redirect_url: Optional[str] = None
    error: Optional[PurchaseError] = None
    reason: Optional[str] = None
    current_package: Optional[Dict[str, Any]] = None

    @classmethod
    def succeeded(
        cls,
        subscription: Subscription,
        payment: Payment,
        redirect_url: Optional[str] = None,
    ) -> "PurchaseResult":
        return cls(
            success=True,
            message="Package purchased successfully! You can now create campaigns.",
            subscription=subscription,
            payment=payment,
            redirect_url=redirect_url,
        )

    @classmethod
    def failed(
        cls,
        error: PurchaseError,
        message: str,
        reason: Optional[str] = None,
        current_package: Optional[Dict[str, Any]] = None,
    ) -> "PurchaseResult":
        return cls(
            success=False,
            message=message,
            error=error,
            reason=reason,
            current_package=current_package,
        )
