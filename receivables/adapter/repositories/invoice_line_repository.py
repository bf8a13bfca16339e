"""SQLAlchemy Invoice Line Repository Implementation"""

from typing import List, Optional
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.domain.invoice_line import InvoiceLine, LineItemKind


class SqlAlchemyInvoiceLineRepository(InvoiceLineRepository):
    """SQLAlchemy implementation of InvoiceLineRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice_line: InvoiceLine) -> InvoiceLine:
        self.session.add(invoice_line)
        await self.session.flush()
        await self.session.refresh(invoice_line)
        return invoice_line

    async def create_many(self, invoice_lines: List[InvoiceLine]) -> List[InvoiceLine]:
        """
        Create multiple invoice lines

        Args:
            invoice_lines: Lines to persist

        Returns:
            Created lines with generated IDs
        """
        self.session.add_all(invoice_lines)
        await self.session.flush()
        for line in invoice_lines:
            await self.session.refresh(line)
        return invoice_lines

    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceLine]:
        statement = (
            select(InvoiceLine)
            .where(InvoiceLine.invoice_id == invoice_id)
            .order_by(InvoiceLine.position.asc(), InvoiceLine.id.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def delete_by_invoice_id(self, invoice_id: int, kind: Optional[LineItemKind] = None) -> None:
        statement = delete(InvoiceLine).where(InvoiceLine.invoice_id == invoice_id)
        if kind is not None:
            statement = statement.where(InvoiceLine.kind == kind)
        await self.session.execute(statement)
        await self.session.flush()

    async def get_latest_by_kind(self, invoice_id: int, kind: LineItemKind) -> Optional[InvoiceLine]:
        statement = (
            select(InvoiceLine)
            .where(InvoiceLine.invoice_id == invoice_id)
            .where(InvoiceLine.kind == kind)
            .order_by(InvoiceLine.created_at.desc(), InvoiceLine.id.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()
