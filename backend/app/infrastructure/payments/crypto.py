"""
Crypto Gateway (NowPayments)

Creates a USDT invoice on the requested network.
"""

from typing import Literal, Optional

from pydantic import Field

from app.domain.payment import PaymentMethod
from app.domain.plan import Plan
from app.domain.purchase import DECLINED_FAILURE, ChargeFailed, ChargeSucceeded, PaymentOutcome
from app.infrastructure.payments.base import EMAIL_PATTERN, BaseGateway, PaymentDataModel


LIVE_API_URL = "https://api.nowpayments.io/v1"
SANDBOX_API_URL = "https://api-sandbox.nowpayments.io/v1"

# NowPayments currency codes for USDT per network
PAY_CURRENCIES = {
    "ethereum": "usdterc20",
    "tron": "usdttrc20",
    "bsc": "usdtbsc",
}


class CryptoPaymentData(PaymentDataModel):
    network: Literal["ethereum", "tron", "bsc"] = "ethereum"
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)


class CryptoGateway(BaseGateway):
    """NowPayments USDT invoices."""

    method = PaymentMethod.CRYPTO
    provider = "nowpayments"
    payment_model = CryptoPaymentData

    def __init__(self, api_key: Optional[str] = None, use_sandbox_api: bool = True, **kwargs):
        super().__init__(**kwargs)
        self._api_key = api_key
        self._api_url = SANDBOX_API_URL if use_sandbox_api else LIVE_API_URL

    def _payload(self, reference: str, plan: Plan, data: CryptoPaymentData) -> dict:
        payload = {
            "price_amount": str(plan.price),
            "price_currency": self._currency.lower(),
            "pay_currency": PAY_CURRENCIES[data.network],
            "order_id": reference,
            "order_description": f"Ad Packages - {plan.name} Plan",
            "ipn_callback_url": f"{self._app_url}/api/payments/nowpayments/callback",
            "success_url": f"{self._app_url}/dashboard?payment=success",
            "cancel_url": f"{self._app_url}/dashboard?payment=cancelled",
        }
        if data.email:
            payload["customer_email"] = data.email
        return payload

    def _simulate(self, plan: Plan, data: CryptoPaymentData) -> ChargeSucceeded:
        reference = self._new_reference()
        payload = self._payload(reference, plan, data)
        payload["simulated"] = True
        return ChargeSucceeded(
            transaction_id=reference,
            redirect_url=f"https://nowpayments.io/payment/?iid={reference}",
            provider_payload=payload,
        )

    async def _charge(self, plan: Plan, data: CryptoPaymentData) -> PaymentOutcome:
        reference = self._new_reference()
        payload = self._payload(reference, plan, data)

        async with self._client() as client:
            response = await client.post(
                f"{self._api_url}/invoice",
                headers={"x-api-key": self._api_key or ""},
                json={**payload, "price_amount": float(plan.price)},
            )
            response.raise_for_status()
            invoice = response.json()

        invoice_url = invoice.get("invoice_url")
        if not invoice_url:
            return ChargeFailed(DECLINED_FAILURE, "NowPayments did not return an invoice URL")

        payload["invoiceId"] = str(invoice.get("id"))
        return ChargeSucceeded(
            transaction_id=reference,
            redirect_url=invoice_url,
            provider_payload=payload,
        )
