"""SQLAlchemy Overdue Config Repository Implementation"""

from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.overdue_config_repository import OverdueConfigRepository
from receivables.domain.overdue import OverdueConfig


class SqlAlchemyOverdueConfigRepository(OverdueConfigRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> OverdueConfig:
        statement = select(OverdueConfig).order_by(OverdueConfig.id.asc()).limit(1)
        result = await self.session.execute(statement)
        config = result.scalar_one_or_none()
        if config is None:
            config = OverdueConfig()
            self.session.add(config)
            await self.session.flush()
            await self.session.refresh(config)
        return config

    async def update(self, config: OverdueConfig) -> OverdueConfig:
        config.updated_at = datetime.utcnow()
        self.session.add(config)
        await self.session.flush()
        await self.session.refresh(config)
        return config
