"""SQLAlchemy Reminder Template Repository Implementation"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.reminder_template_repository import ReminderTemplateRepository
from receivables.domain.overdue import ReminderTemplate, ReminderTier


class SqlAlchemyReminderTemplateRepository(ReminderTemplateRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, template: ReminderTemplate) -> ReminderTemplate:
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template

    async def get_by_id(self, template_id: int) -> Optional[ReminderTemplate]:
        result = await self.session.execute(select(ReminderTemplate).where(ReminderTemplate.id == template_id))
        return result.scalar_one_or_none()

    async def get_default_for_tier(self, tier: ReminderTier) -> Optional[ReminderTemplate]:
        # Defaults first, then oldest
        statement = (
            select(ReminderTemplate)
            .where(ReminderTemplate.tier == tier)
            .order_by(ReminderTemplate.is_default.desc(), ReminderTemplate.id.asc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(self, tier: Optional[ReminderTier] = None) -> List[ReminderTemplate]:
        statement = select(ReminderTemplate)
        if tier:
            statement = statement.where(ReminderTemplate.tier == tier)
        statement = statement.order_by(ReminderTemplate.tier.asc(), ReminderTemplate.id.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, template: ReminderTemplate) -> ReminderTemplate:
        template.updated_at = datetime.utcnow()
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template

    async def clear_default(self, tier: ReminderTier, except_id: Optional[int] = None) -> None:
        statement = (
            update(ReminderTemplate)
            .where(ReminderTemplate.tier == tier)
            .values(is_default=False)
        )
        if except_id is not None:
            statement = statement.where(ReminderTemplate.id != except_id)
        await self.session.execute(statement)
        await self.session.flush()

    async def delete(self, template_id: int) -> None:
        await self.session.execute(delete(ReminderTemplate).where(ReminderTemplate.id == template_id))
        await self.session.flush()
