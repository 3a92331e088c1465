"""
Payment Database Model

SQLModel table for the append-only payment ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from app.infrastructure.db.models.base import utcnow


class PaymentModel(SQLModel, table=True):
    """Payment record. Rows are inserted, never updated by the purchase flow."""

    __tablename__ = "payments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))

    type: str = Field(default="deposit", max_length=20)
    status: str = Field(default="pending", max_length=20)
    method: str = Field(max_length=20)
    amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    currency: str = Field(default="USD", max_length=3)
    description: str = Field(sa_column=Column(Text, nullable=False))
    transaction_id: Optional[str] = Field(default=None, max_length=255, index=True)

    # "metadata" is reserved on declarative classes
    payment_metadata: dict = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSONB, nullable=False),
        description="Gateway request/response echo and subscription linkage"
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
