"""
Gateway Adapter Base

Shared charge pipeline for every payment provider:
validate payment data, then either simulate acceptance (sandbox) or call
the provider, translating transport errors into purchase outcomes.
"""

import logging
from abc import abstractmethod
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, Optional, Type
from uuid import uuid4

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from app.domain.billing.interfaces import GatewayAdapter
from app.domain.plan import Plan
from app.domain.purchase import (
    DECLINED_FAILURE,
    TIMEOUT_FAILURE,
    VALIDATION_FAILURE,
    ChargeFailed,
    ChargeSucceeded,
    PaymentOutcome,
)
from app.infrastructure.exceptions import GatewayUnavailableError


logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class PaymentDataModel(BaseModel):
    """Base for provider-specific payment data sent by the web client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


def describe_validation_error(error: ValidationError) -> str:
    """First validation problem as a short, user-facing sentence."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "paymentData"
    return f"Invalid payment data: {field} {first.get('msg', 'is invalid').lower()}"


def minor_units(amount: Decimal) -> int:
    """Amount in cents."""
    return int((amount * 100).to_integral_value())


class BaseGateway(GatewayAdapter):
    """
    Template for provider adapters.

    Subclasses declare ``payment_model`` and implement ``_simulate`` and
    ``_charge``. An ``http_client`` can be injected (tests use
    ``httpx.MockTransport``); otherwise a client is opened per charge.
    """

    payment_model: Type[PaymentDataModel] = PaymentDataModel

    def __init__(
        self,
        sandbox: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        currency: str = "USD",
        app_url: str = "http://localhost:3000",
    ):
        self._sandbox = sandbox
        self._http_client = http_client
        self._timeout = timeout
        self._currency = currency
        self._app_url = app_url.rstrip("/")

    @property
    def sandbox(self) -> bool:
        return self._sandbox

    async def attempt_charge(self, plan: Plan, payment_data: Dict[str, Any]) -> PaymentOutcome:
        try:
            data = self.payment_model.model_validate(payment_data or {})
        except ValidationError as e:
            return ChargeFailed(VALIDATION_FAILURE, describe_validation_error(e))

        if self._sandbox:
            outcome = self._simulate(plan, data)
            logger.info(f"Simulated {self.provider} charge {outcome.transaction_id} for {plan.name}")
            return outcome

        try:
            return await self._charge(plan, data)
        except httpx.TimeoutException:
            logger.warning(f"{self.provider} timed out charging {plan.name}")
            return ChargeFailed(TIMEOUT_FAILURE, f"{self.provider} did not respond in time")
        except httpx.HTTPStatusError as e:
            message = self._provider_message(e.response)
            logger.warning(f"{self.provider} rejected charge: HTTP {e.response.status_code} {message}")
            return ChargeFailed(DECLINED_FAILURE, message)
        except httpx.TransportError as e:
            logger.error(f"{self.provider} unreachable: {e}")
            raise GatewayUnavailableError(
                f"{self.provider} is unreachable",
                provider=self.provider,
                original_error=e,
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            # 2xx with a body that is not JSON or lacks the expected fields
            logger.error(f"{self.provider} returned an unexpected response: {e!r}")
            return ChargeFailed(DECLINED_FAILURE, f"{self.provider} returned an unexpected response")

    @abstractmethod
    def _simulate(self, plan: Plan, data: PaymentDataModel) -> ChargeSucceeded:
        """Sandbox acceptance in the provider's response shape."""
        pass

    @abstractmethod
    async def _charge(self, plan: Plan, data: PaymentDataModel) -> PaymentOutcome:
        """Live call to the provider."""
        pass

    # =========================================================================
    # Helpers
    # =========================================================================

    def _new_reference(self) -> str:
        return f"{self.provider}_{uuid4().hex}"

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    def _provider_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            for key in ("message", "error_description", "error"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"{self.provider} returned HTTP {response.status_code}"
