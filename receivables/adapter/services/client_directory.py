"""Client directory backed by the local clients table"""

from typing import List, Optional
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.services.client_directory import ClientDirectory, ClientInfo
from receivables.domain.client import Client


class SqlClientDirectory(ClientDirectory):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, client_id: int) -> Optional[ClientInfo]:
        result = await self.session.execute(select(Client).where(Client.id == client_id))
        client = result.scalar_one_or_none()
        if client is None:
            return None
        return ClientInfo(id=client.id, name=client.name, email=client.email)

    async def find_by_name(self, query: str) -> List[ClientInfo]:
        statement = (
            select(Client)
            .where(func.lower(Client.name).like(f"%{query.lower()}%"))
            .order_by(Client.name.asc())
        )
        result = await self.session.execute(statement)
        return [ClientInfo(id=c.id, name=c.name, email=c.email) for c in result.scalars().all()]
