"""
Card Gateway (Stripe)

Charges a tokenized card with a confirmed PaymentIntent.
The stripe SDK is synchronous, so calls run in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import stripe
from pydantic import Field

from app.domain.payment import PaymentMethod
from app.domain.plan import Plan
from app.domain.purchase import (
    DECLINED_FAILURE,
    TIMEOUT_FAILURE,
    ChargeFailed,
    ChargeSucceeded,
    PaymentOutcome,
)
from app.infrastructure.exceptions import GatewayUnavailableError
from app.infrastructure.payments.base import (
    EMAIL_PATTERN,
    BaseGateway,
    PaymentDataModel,
    minor_units,
)


logger = logging.getLogger(__name__)


def _is_timeout(error: stripe.APIConnectionError) -> bool:
    # The SDK wraps requests' ConnectTimeout/ReadTimeout in its message
    return "timeout" in str(error).lower()


class CardPaymentData(PaymentDataModel):
    payment_method_id: str = Field(alias="paymentMethodId", min_length=1)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)


class CardGateway(BaseGateway):
    """Stripe card payments."""

    method = PaymentMethod.CARD
    provider = "stripe"
    payment_model = CardPaymentData

    def __init__(
        self,
        api_key: Optional[str] = None,
        stripe_client: Optional[stripe.StripeClient] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._api_key = api_key
        self._stripe_client = stripe_client

    def _build_client(self) -> stripe.StripeClient:
        """
        Stripe client whose requests finish within the gateway timeout.

        Connect and read each get half of the budget and the SDK does not
        retry, so the worker thread cannot outlive the purchase request.
        """
        half = self._timeout / 2
        return stripe.StripeClient(
            self._api_key or "",
            http_client=stripe.RequestsClient(timeout=(half, half)),
            max_network_retries=0,
        )

    def _simulate(self, plan: Plan, data: CardPaymentData) -> ChargeSucceeded:
        return ChargeSucceeded(
            transaction_id=self._new_reference(),
            provider_payload={
                "amount": minor_units(plan.price),
                "currency": self._currency.lower(),
                "status": "succeeded",
                "simulated": True,
            },
        )

    async def _charge(self, plan: Plan, data: CardPaymentData) -> PaymentOutcome:
        reference = self._new_reference()
        params: Dict[str, Any] = {
            "amount": minor_units(plan.price),
            "currency": self._currency.lower(),
            "payment_method": data.payment_method_id,
            "confirm": True,
            "description": f"Package Purchase: {plan.name}",
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
            "metadata": {"package_type": plan.type.value},
        }
        if data.email:
            params["receipt_email"] = data.email

        client = self._stripe_client or self._build_client()
        try:
            intent = await asyncio.to_thread(
                client.payment_intents.create,
                params=params,
                options={"idempotency_key": reference},
            )
        except stripe.CardError as e:
            logger.info(f"Card declined: {e.code}")
            return ChargeFailed(DECLINED_FAILURE, e.user_message or "Your card was declined")
        except stripe.APIConnectionError as e:
            if _is_timeout(e):
                logger.warning(f"Stripe timed out charging {plan.name} ({reference})")
                return ChargeFailed(TIMEOUT_FAILURE, "Stripe did not respond in time")
            raise GatewayUnavailableError(
                "Stripe is unreachable",
                provider=self.provider,
                original_error=e,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating PaymentIntent: {e}")
            return ChargeFailed(DECLINED_FAILURE, e.user_message or "Card payment failed")

        if intent.status != "succeeded":
            return ChargeFailed(DECLINED_FAILURE, f"Card payment {intent.status}")

        return ChargeSucceeded(
            transaction_id=intent.id,
            provider_payload={
                "paymentIntentId": intent.id,
                "idempotencyKey": reference,
                "amount": intent.amount,
                "currency": intent.currency,
                "status": intent.status,
            },
        )
