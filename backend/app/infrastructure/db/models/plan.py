"""
Plan Database Model

SQLModel table for purchasable package definitions.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Index, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class PlanModel(BaseModel, table=True):
    """
    Plan table.

    Maps to the 'plans' table in PostgreSQL. Non-custom plan types are
    unique so lazy materialization of well-known slugs converges on one row.
    """

    __tablename__ = "plans"
    __table_args__ = (
        Index(
            "uq_plans_well_known_type",
            "type",
            unique=True,
            postgresql_where=text("type <> 'custom'"),
        ),
    )

    type: str = Field(sa_column=Column(String(32), nullable=False, index=True))
    name: str = Field(sa_column=Column(String(255), nullable=False))
    description: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))

    # Pricing
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    billing_cycle: str = Field(default="monthly", max_length=20)
    original_price: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(10, 2)))
    discount_percentage: int = Field(default=0)

    # Presentation
    features: list = Field(default_factory=list, sa_column=Column(JSONB, nullable=False))
    limitations: list = Field(default_factory=list, sa_column=Column(JSONB, nullable=False))
    is_active: bool = Field(default=True, index=True)
    is_popular: bool = Field(default=False)

    # Limits and capabilities
    max_accounts: int = Field(default=1)
    daily_budget_cap: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(10, 2)))
    has_unlimited_budget: bool = Field(default=False)
    has_team_collaboration: bool = Field(default=False)
    has_dedicated_consultant: bool = Field(default=False)
