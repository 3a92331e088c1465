"""
Payment Domain Models

Append-only records of purchase attempts and the payment method vocabulary
shared by gateway adapters, subscriptions and payments.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


# Stored and computed as Decimal, rendered as a JSON number in API responses
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class PaymentType(str, Enum):
    """What the money movement was for."""
    DEPOSIT = "deposit"
    CHARGE = "charge"


class PaymentStatus(str, Enum):
    """Payment outcome."""
    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"


class PaymentMethod(str, Enum):
    """Supported payment methods, one gateway adapter each."""
    CARD = "card"
    WALLET = "wallet"
    MOBILE_MONEY = "mobile_money"
    CRYPTO = "crypto"


class Payment(BaseModel):
    """Core payment domain entity."""
    id: Optional[UUID] = None
    user_id: str
    type: PaymentType = PaymentType.DEPOSIT
    status: PaymentStatus = PaymentStatus.COMPLETED
    method: PaymentMethod
    amount: Money
    currency: str = "USD"
    description: str
    transaction_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
