"""SQLAlchemy Recurring Template Repository Implementation"""

from typing import List, Optional
from datetime import date, datetime
from sqlalchemy import delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.recurring_template_repository import RecurringTemplateRepository
from receivables.domain.recurring_template import (
    RecurringInvoiceTemplate,
    RecurringTemplateItem,
    RecurringInvoiceHistory,
    RecurringStatus,
    Frequency,
)


class SqlAlchemyRecurringTemplateRepository(RecurringTemplateRepository):
    """SQLAlchemy implementation of RecurringTemplateRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, template: RecurringInvoiceTemplate, items: List[RecurringTemplateItem]
    ) -> RecurringInvoiceTemplate:
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)

        for item in items:
            item.template_id = template.id
        self.session.add_all(items)
        await self.session.flush()
        return template

    async def get_by_id(self, template_id: int, for_update: bool = False) -> Optional[RecurringInvoiceTemplate]:
        statement = select(RecurringInvoiceTemplate).where(RecurringInvoiceTemplate.id == template_id)
        if for_update:
            statement = statement.with_for_update()
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        client_id: Optional[int] = None,
        status: Optional[RecurringStatus] = None,
        frequency: Optional[Frequency] = None,
    ) -> List[RecurringInvoiceTemplate]:
        statement = select(RecurringInvoiceTemplate)
        if client_id is not None:
            statement = statement.where(RecurringInvoiceTemplate.client_id == client_id)
        if status:
            statement = statement.where(RecurringInvoiceTemplate.status == status)
        if frequency:
            statement = statement.where(RecurringInvoiceTemplate.frequency == frequency)
        statement = statement.order_by(RecurringInvoiceTemplate.next_date.asc(), RecurringInvoiceTemplate.id.asc())

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_due(self, today: date) -> List[RecurringInvoiceTemplate]:
        statement = (
            select(RecurringInvoiceTemplate)
            .where(RecurringInvoiceTemplate.status == RecurringStatus.ACTIVE)
            .where(RecurringInvoiceTemplate.next_date <= today)
            .order_by(RecurringInvoiceTemplate.next_date.asc(), RecurringInvoiceTemplate.id.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, template: RecurringInvoiceTemplate) -> RecurringInvoiceTemplate:
        template.updated_at = datetime.utcnow()
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template

    async def delete(self, template_id: int) -> None:
        await self.session.execute(
            delete(RecurringTemplateItem).where(RecurringTemplateItem.template_id == template_id)
        )
        await self.session.execute(
            delete(RecurringInvoiceHistory).where(RecurringInvoiceHistory.template_id == template_id)
        )
        await self.session.execute(
            delete(RecurringInvoiceTemplate).where(RecurringInvoiceTemplate.id == template_id)
        )
        await self.session.flush()

    async def get_items(self, template_id: int) -> List[RecurringTemplateItem]:
        statement = (
            select(RecurringTemplateItem)
            .where(RecurringTemplateItem.template_id == template_id)
            .order_by(RecurringTemplateItem.position.asc(), RecurringTemplateItem.id.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def replace_items(self, template_id: int, items: List[RecurringTemplateItem]) -> List[RecurringTemplateItem]:
        await self.session.execute(
            delete(RecurringTemplateItem).where(RecurringTemplateItem.template_id == template_id)
        )
        for item in items:
            item.template_id = template_id
        self.session.add_all(items)
        await self.session.flush()
        return await self.get_items(template_id)

    async def add_history(self, history: RecurringInvoiceHistory) -> RecurringInvoiceHistory:
        self.session.add(history)
        await self.session.flush()
        await self.session.refresh(history)
        return history

    async def get_history(self, template_id: int) -> List[RecurringInvoiceHistory]:
        statement = (
            select(RecurringInvoiceHistory)
            .where(RecurringInvoiceHistory.template_id == template_id)
            .order_by(RecurringInvoiceHistory.generated_at.desc(), RecurringInvoiceHistory.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_history(self, template_id: int) -> int:
        statement = (
            select(func.count())
            .select_from(RecurringInvoiceHistory)
            .where(RecurringInvoiceHistory.template_id == template_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one()
