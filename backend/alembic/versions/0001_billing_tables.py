"""Create plans, subscriptions and payments tables

Revision ID: 0001_billing_tables
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_billing_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create billing tables with their uniqueness guarantees."""

    op.create_table(
        'plans',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),

        # Pricing
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('billing_cycle', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('original_price', sa.Numeric(10, 2)),
        sa.Column('discount_percentage', sa.Integer, nullable=False, server_default='0'),

        # Presentation
        sa.Column('features', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('limitations', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('is_popular', sa.Boolean, nullable=False, server_default='false'),

        # Limits and capabilities
        sa.Column('max_accounts', sa.Integer, nullable=False, server_default='1'),
        sa.Column('daily_budget_cap', sa.Numeric(10, 2)),
        sa.Column('has_unlimited_budget', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('has_team_collaboration', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('has_dedicated_consultant', sa.Boolean, nullable=False, server_default='false'),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_plans_type', 'plans', ['type'])
    op.create_index('ix_plans_is_active', 'plans', ['is_active'])

    # One row per well-known type; custom plans may repeat
    op.create_index(
        'uq_plans_well_known_type',
        'plans',
        ['type'],
        unique=True,
        postgresql_where=sa.text("type <> 'custom'"),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('plan_id', sa.Uuid(), sa.ForeignKey('plans.id'), nullable=False),

        # Subscription details
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False),
        sa.Column('transaction_id', sa.String(255)),
        sa.Column('auto_renew', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('notes', sa.Text),

        # Term
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_plan_id', 'subscriptions', ['plan_id'])

    # At most one active subscription per user
    op.create_index(
        'uq_subscriptions_user_active',
        'subscriptions',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='deposit'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('transaction_id', sa.String(255)),
        sa.Column('metadata', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'])


def downgrade() -> None:
    """Drop billing tables."""

    op.drop_table('payments')
    op.drop_index('uq_subscriptions_user_active', table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_index('uq_plans_well_known_type', table_name='plans')
    op.drop_table('plans')
