"""
Subscription Database Model

SQLModel table for subscription data persistence.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Index, Numeric, String, Text, text
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class SubscriptionModel(BaseModel, table=True):
    """
    Subscription table for storing user subscription data.

    Maps to the 'subscriptions' table in PostgreSQL. The partial unique
    index backs the one-active-subscription-per-user rule.
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index(
            "uq_subscriptions_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
    )

    user_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))
    plan_id: UUID = Field(foreign_key="plans.id", nullable=False, index=True)

    # Subscription details
    status: str = Field(default="active", max_length=20)
    amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    payment_method: str = Field(max_length=20)
    transaction_id: Optional[str] = Field(default=None, max_length=255)
    auto_renew: bool = Field(default=True)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))

    # Term
    start_date: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    end_date: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
