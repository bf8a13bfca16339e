"""SQLAlchemy Payment Method Repository Implementation"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy import delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.payment_method_repository import PaymentMethodRepository
from receivables.domain.payment_method import PaymentMethod


class SqlAlchemyPaymentMethodRepository(PaymentMethodRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, method: PaymentMethod) -> PaymentMethod:
        self.session.add(method)
        await self.session.flush()
        await self.session.refresh(method)
        return method

    async def get_by_id(self, method_id: int) -> Optional[PaymentMethod]:
        result = await self.session.execute(select(PaymentMethod).where(PaymentMethod.id == method_id))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[PaymentMethod]:
        statement = select(PaymentMethod).where(func.lower(PaymentMethod.name) == name.lower())
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(self, active_only: bool = False) -> List[PaymentMethod]:
        statement = select(PaymentMethod)
        if active_only:
            statement = statement.where(PaymentMethod.is_active == True)  # noqa: E712
        statement = statement.order_by(PaymentMethod.name.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, method: PaymentMethod) -> PaymentMethod:
        method.updated_at = datetime.utcnow()
        self.session.add(method)
        await self.session.flush()
        await self.session.refresh(method)
        return method

    async def delete(self, method_id: int) -> None:
        await self.session.execute(delete(PaymentMethod).where(PaymentMethod.id == method_id))
        await self.session.flush()
