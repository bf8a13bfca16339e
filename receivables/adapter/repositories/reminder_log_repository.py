"""SQLAlchemy Reminder Log Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.reminder_log_repository import ReminderLogRepository
from receivables.domain.overdue import ReminderLog


class SqlAlchemyReminderLogRepository(ReminderLogRepository):
    """Append-only reminder history"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, log: ReminderLog) -> ReminderLog:
        self.session.add(log)
        await self.session.flush()
        await self.session.refresh(log)
        return log

    async def get_by_invoice_id(self, invoice_id: int) -> List[ReminderLog]:
        statement = (
            select(ReminderLog)
            .where(ReminderLog.invoice_id == invoice_id)
            .order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
