"""
Payment Repository

Insert-only data access for payment records.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.billing.interfaces import IPaymentRepository
from app.domain.payment import Payment, PaymentMethod, PaymentStatus, PaymentType
from app.infrastructure.db.models.payment import PaymentModel


class PaymentRepository(IPaymentRepository):
    """Repository for payment records."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, payment: Payment) -> Payment:
        """Insert a payment record."""
        model = PaymentModel(
            user_id=payment.user_id,
            type=payment.type.value,
            status=payment.status.value,
            method=payment.method.value,
            amount=payment.amount,
            currency=payment.currency,
            description=payment.description,
            transaction_id=payment.transaction_id,
            payment_metadata=payment.metadata,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    def _to_domain(self, model: PaymentModel) -> Payment:
        """Convert database model to domain entity."""
        return Payment(
            id=model.id,
            user_id=model.user_id,
            type=PaymentType(model.type),
            status=PaymentStatus(model.status),
            method=PaymentMethod(model.method),
            amount=model.amount,
            currency=model.currency,
            description=model.description,
            transaction_id=model.transaction_id,
            metadata=dict(model.payment_metadata or {}),
            created_at=model.created_at,
        )
