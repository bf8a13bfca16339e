"""SQLAlchemy Payment Repository Implementation"""

from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.payment_repository import PaymentRepository, MethodTotals
from receivables.domain.payment import Payment


class SqlAlchemyPaymentRepository(PaymentRepository):
    """SQLAlchemy implementation of PaymentRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        statement = select(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: int) -> List[Payment]:
        statement = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def sum_by_invoice_id(self, invoice_id: int) -> Decimal:
        statement = (
            select(func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.invoice_id == invoice_id)
        )
        result = await self.session.execute(statement)
        return Decimal(str(result.scalar_one()))

    async def update(self, payment: Payment) -> Payment:
        payment.updated_at = datetime.utcnow()
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def delete(self, payment_id: int) -> None:
        await self.session.execute(delete(Payment).where(Payment.id == payment_id))
        await self.session.flush()

    async def count_by_method(self, payment_method_id: int) -> int:
        statement = (
            select(func.count())
            .select_from(Payment)
            .where(Payment.payment_method_id == payment_method_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one()

    async def totals_by_method(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[MethodTotals]:
        statement = select(
            Payment.payment_method_id,
            func.count(Payment.id),
            func.coalesce(func.sum(Payment.amount), 0),
        )
        if start_date:
            statement = statement.where(Payment.payment_date >= start_date)
        if end_date:
            statement = statement.where(Payment.payment_date <= end_date)
        statement = statement.group_by(Payment.payment_method_id)

        result = await self.session.execute(statement)
        return [
            MethodTotals(payment_method_id=method_id, count=count, total_amount=Decimal(str(total)))
            for method_id, count, total in result.all()
        ]
