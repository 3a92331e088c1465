"""
Purchase Orchestrator

Entry point for package purchases. Sequences plan resolution, the gateway
charge, the subscription ledger and payment persistence behind a single
contract: business failures come back as a PurchaseResult, infrastructure
failures propagate to the caller.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from app.domain.billing.interfaces import GatewayAdapter, IPaymentRepository
from app.domain.billing.ledger import SubscriptionLedger
from app.domain.billing.plan_resolver import PlanResolver
from app.domain.payment import Payment, PaymentMethod, PaymentStatus, PaymentType
from app.domain.plan import Plan
from app.domain.purchase import (
    TIMEOUT_FAILURE,
    ChargeFailed,
    ChargeSucceeded,
    PaymentOutcome,
    PurchaseError,
    PurchaseResult,
)
from app.domain.subscription import Subscription
from app.infrastructure.exceptions import PackageAlreadyActiveError, PlanNotFoundError


logger = logging.getLogger(__name__)


class PurchaseOrchestrator:
    """
    Coordinates one purchase request end to end.

    Failed charges are never retried and leave no subscription or payment
    behind. The caller is expected to commit the unit of work when
    ``purchase`` returns and roll it back when it raises.
    """

    def __init__(
        self,
        resolver: PlanResolver,
        ledger: SubscriptionLedger,
        payments: IPaymentRepository,
        gateways: Mapping[PaymentMethod, GatewayAdapter],
        gateway_timeout: Optional[float] = None,
        currency: str = "USD",
    ):
        self._resolver = resolver
        self._ledger = ledger
        self._payments = payments
        self._gateways = gateways
        self._gateway_timeout = gateway_timeout
        self._currency = currency

    async def purchase(
        self,
        user_id: str,
        package_id: Optional[str],
        payment_method: Optional[str],
        payment_data: Optional[Dict[str, Any]] = None,
    ) -> PurchaseResult:
        """Purchase ``package_id`` for ``user_id`` through ``payment_method``."""
        payment_data = payment_data or {}

        if not user_id or not package_id or not payment_method:
            return PurchaseResult.failed(
                PurchaseError.INVALID_REQUEST,
                "Missing required fields: packageId and paymentMethod are required",
            )

        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            return PurchaseResult.failed(
                PurchaseError.INVALID_REQUEST,
                f"Unsupported payment method: {payment_method}",
            )

        gateway = self._gateways.get(method)
        if gateway is None:
            return PurchaseResult.failed(
                PurchaseError.INVALID_REQUEST,
                f"Payment method {method.value} is not available",
            )

        try:
            plan = await self._resolver.resolve(package_id)
        except PlanNotFoundError as e:
            logger.info(f"Purchase by {user_id} rejected: {e.message}")
            return PurchaseResult.failed(PurchaseError.PLAN_NOT_FOUND, e.message)

        try:
            await self._ledger.ensure_not_already_active(user_id, plan)
        except PackageAlreadyActiveError as e:
            return PurchaseResult.failed(
                PurchaseError.PACKAGE_ALREADY_ACTIVE,
                e.message,
                current_package=e.current_package,
            )

        outcome = await self._charge(gateway, plan, payment_data)
        if isinstance(outcome, ChargeFailed):
            logger.warning(
                f"Charge for {plan.type.value} via {gateway.provider} failed "
                f"for user {user_id}: {outcome.reason}"
            )
            return PurchaseResult.failed(
                PurchaseError.PAYMENT_FAILED,
                outcome.message or f"Payment failed: {outcome.reason}",
                reason=outcome.reason,
            )

        try:
            subscription = await self._ledger.apply_purchase(
                user_id, plan, method, transaction_id=outcome.transaction_id
            )
        except PackageAlreadyActiveError as e:
            # Charged before a concurrent request activated the same plan type.
            await self._record_payment(
                user_id, plan, gateway, outcome, payment_data,
                subscription=None, ledger_outcome="package_already_active",
            )
            return PurchaseResult.failed(
                PurchaseError.PACKAGE_ALREADY_ACTIVE,
                e.message,
                current_package=e.current_package,
            )

        payment = await self._record_payment(
            user_id, plan, gateway, outcome, payment_data, subscription=subscription
        )
        return PurchaseResult.succeeded(subscription, payment, redirect_url=outcome.redirect_url)

    async def cancel(self, user_id: str) -> Subscription:
        """
        Cancel the user's active subscription.

        Raises:
            NoActiveSubscriptionError: nothing to cancel
        """
        return await self._ledger.cancel(user_id)

    async def _charge(
        self,
        gateway: GatewayAdapter,
        plan: Plan,
        payment_data: Dict[str, Any],
    ) -> PaymentOutcome:
        logger.info(f"Charging {plan.price} for {plan.type.value} via {gateway.provider}")
        try:
            return await asyncio.wait_for(
                gateway.attempt_charge(plan, payment_data),
                timeout=self._gateway_timeout,
            )
        except asyncio.TimeoutError:
            return ChargeFailed(TIMEOUT_FAILURE, "The payment provider did not respond in time")

    async def _record_payment(
        self,
        user_id: str,
        plan: Plan,
        gateway: GatewayAdapter,
        outcome: ChargeSucceeded,
        payment_data: Dict[str, Any],
        subscription: Optional[Subscription],
        ledger_outcome: Optional[str] = None,
    ) -> Payment:
        metadata: Dict[str, Any] = {
            "subscriptionId": str(subscription.id) if subscription else None,
            "transactionId": outcome.transaction_id,
            "paymentData": payment_data,
            "packageType": plan.type.value,
            "provider": gateway.provider,
        }
        if outcome.redirect_url:
            metadata["redirectUrl"] = outcome.redirect_url
        if outcome.provider_payload:
            metadata["providerPayload"] = outcome.provider_payload
        if ledger_outcome:
            metadata["ledgerOutcome"] = ledger_outcome

        payment = await self._payments.create(Payment(
            user_id=user_id,
            type=PaymentType.DEPOSIT,
            status=PaymentStatus.COMPLETED,
            method=gateway.method,
            amount=plan.price,
            currency=self._currency,
            description=f"Package Purchase: {plan.name}",
            transaction_id=outcome.transaction_id,
            metadata=metadata,
        ))
        logger.info(f"Recorded payment {payment.id} ({outcome.transaction_id}) for user {user_id}")
        return payment
