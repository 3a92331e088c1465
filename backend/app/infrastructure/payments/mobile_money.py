"""
Mobile Money Gateway (Flutterwave)

Creates a hosted payment link for mobile money checkout.
"""

from typing import Optional

from pydantic import Field

from app.domain.payment import PaymentMethod
from app.domain.plan import Plan
from app.domain.purchase import DECLINED_FAILURE, ChargeFailed, ChargeSucceeded, PaymentOutcome
from app.infrastructure.payments.base import EMAIL_PATTERN, BaseGateway, PaymentDataModel


HOSTED_CHECKOUT_URL = "https://checkout.flutterwave.com/v3/hosted/pay"


class MobileMoneyPaymentData(PaymentDataModel):
    phone_number: str = Field(alias="phoneNumber", min_length=6)
    email: str = Field(pattern=EMAIL_PATTERN)
    payment_type: str = Field(default="mobilemoney", alias="paymentType", min_length=1)


class MobileMoneyGateway(BaseGateway):
    """Flutterwave hosted mobile money payments."""

    method = PaymentMethod.MOBILE_MONEY
    provider = "flutterwave"
    payment_model = MobileMoneyPaymentData

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: str = "https://api.flutterwave.com/v3",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")

    def _payload(self, reference: str, plan: Plan, data: MobileMoneyPaymentData) -> dict:
        return {
            "tx_ref": reference,
            "amount": str(plan.price),
            "currency": self._currency,
            "payment_options": data.payment_type,
            "redirect_url": f"{self._app_url}/dashboard?payment=success",
            "customer": {
                "email": data.email,
                "phonenumber": data.phone_number,
            },
            "customizations": {
                "title": f"Ad Packages - {plan.name}",
                "description": f"Mobile Money Payment for {plan.name} plan",
            },
        }

    def _simulate(self, plan: Plan, data: MobileMoneyPaymentData) -> ChargeSucceeded:
        reference = self._new_reference()
        payload = self._payload(reference, plan, data)
        payload["simulated"] = True
        return ChargeSucceeded(
            transaction_id=reference,
            redirect_url=f"{HOSTED_CHECKOUT_URL}/{reference}",
            provider_payload=payload,
        )

    async def _charge(self, plan: Plan, data: MobileMoneyPaymentData) -> PaymentOutcome:
        reference = self._new_reference()
        payload = self._payload(reference, plan, data)

        async with self._client() as client:
            response = await client.post(
                f"{self._base_url}/payments",
                headers={"Authorization": f"Bearer {self._secret_key}"},
                json=payload,
            )
            response.raise_for_status()
            body = response.json()

        link = (body.get("data") or {}).get("link")
        if body.get("status") != "success" or not link:
            return ChargeFailed(
                DECLINED_FAILURE,
                body.get("message") or "Flutterwave did not return a payment link",
            )

        return ChargeSucceeded(transaction_id=reference, redirect_url=link, provider_payload=payload)
