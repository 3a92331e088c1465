"""
Wallet Gateway (PayPal)

Creates a CAPTURE order and hands back the approval link.
"""

from typing import Optional

from pydantic import Field

from app.domain.payment import PaymentMethod
from app.domain.plan import Plan
from app.domain.purchase import ChargeSucceeded, PaymentOutcome
from app.infrastructure.payments.base import EMAIL_PATTERN, BaseGateway, PaymentDataModel


class WalletPaymentData(PaymentDataModel):
    email: str = Field(pattern=EMAIL_PATTERN)


class WalletGateway(BaseGateway):
    """PayPal redirect payments."""

    method = PaymentMethod.WALLET
    provider = "paypal"
    payment_model = WalletPaymentData

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: str = "https://api-m.sandbox.paypal.com",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url.rstrip("/")

    def _simulate(self, plan: Plan, data: WalletPaymentData) -> ChargeSucceeded:
        reference = self._new_reference()
        return ChargeSucceeded(
            transaction_id=reference,
            redirect_url=f"https://www.sandbox.paypal.com/checkoutnow?token={reference}",
            provider_payload={
                "amount": f"{plan.price:.2f}",
                "currency": self._currency,
                "payerEmail": data.email,
                "simulated": True,
            },
        )

    async def _charge(self, plan: Plan, data: WalletPaymentData) -> PaymentOutcome:
        reference = self._new_reference()
        async with self._client() as client:
            token_response = await client.post(
                f"{self._base_url}/v1/oauth2/token",
                auth=(self._client_id or "", self._client_secret or ""),
                data={"grant_type": "client_credentials"},
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            response = await client.post(
                f"{self._base_url}/v2/checkout/orders",
                headers={"Authorization": f"Bearer {access_token}"},
                json={
                    "intent": "CAPTURE",
                    "purchase_units": [{
                        "reference_id": reference,
                        "description": f"Package Purchase: {plan.name}",
                        "amount": {
                            "currency_code": self._currency,
                            "value": f"{plan.price:.2f}",
                        },
                    }],
                    "payment_source": {
                        "paypal": {
                            "email_address": data.email,
                            "experience_context": {
                                "return_url": f"{self._app_url}/dashboard?payment=success",
                                "cancel_url": f"{self._app_url}/dashboard?payment=cancelled",
                            },
                        },
                    },
                },
            )
            response.raise_for_status()
            order = response.json()

        approve_url = next(
            (
                link["href"]
                for link in order.get("links", [])
                if link.get("rel") in ("approve", "payer-action")
            ),
            None,
        )
        return ChargeSucceeded(
            transaction_id=order["id"],
            redirect_url=approve_url,
            provider_payload={
                "orderId": order["id"],
                "referenceId": reference,
                "status": order.get("status"),
            },
        )
