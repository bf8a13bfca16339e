"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Iterable, List, Optional
from datetime import date, datetime, timedelta
from decimal import Decimal
from sqlalchemy import delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.invoice_repository import InvoiceRepository, InvoiceFilter, StatusTotals
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.invoice_line import InvoiceLine
from receivables.domain.overdue import ReminderLog
from receivables.domain.payment import Payment
from receivables.domain.payment_plan import PaymentPlan, Installment


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        statement = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        statement = select(Invoice).where(Invoice.invoice_number == invoice_number)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(self, filters: InvoiceFilter) -> List[Invoice]:
        """
        Retrieve invoices matching the filters

        Args:
            filters: InvoiceFilter with optional client, status and date ranges

        Returns:
            Invoices, newest first
        """
        statement = select(Invoice)

        if filters.client_id is not None:
            statement = statement.where(Invoice.client_id == filters.client_id)
        if filters.status:
            statement = statement.where(Invoice.status == filters.status)
        if filters.created_from:
            statement = statement.where(Invoice.created_at >= datetime.combine(filters.created_from, datetime.min.time()))
        if filters.created_to:
            statement = statement.where(
                Invoice.created_at < datetime.combine(filters.created_to + timedelta(days=1), datetime.min.time())
            )
        if filters.due_from:
            statement = statement.where(Invoice.due_date >= filters.due_from)
        if filters.due_to:
            statement = statement.where(Invoice.due_date <= filters.due_to)

        statement = statement.order_by(Invoice.created_at.desc(), Invoice.id.desc())
        statement = statement.limit(filters.limit).offset(filters.offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_past_due(
        self,
        today: date,
        statuses: Iterable[InvoiceStatus],
        client_id: Optional[int] = None,
    ) -> List[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.due_date < today)
            .where(Invoice.status.in_(list(statuses)))
            .where(Invoice.total_amount > Invoice.amount_paid)
        )
        if client_id is not None:
            statement = statement.where(Invoice.client_id == client_id)

        statement = statement.order_by(Invoice.due_date.asc(), Invoice.id.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def delete(self, invoice_id: int) -> None:
        """
        Delete an invoice and everything that belongs to it

        Dependents are removed explicitly because SQLite does not enforce
        ON DELETE CASCADE unless foreign keys are switched on.

        Args:
            invoice_id: Invoice ID
        """
        plan_ids = select(PaymentPlan.id).where(PaymentPlan.invoice_id == invoice_id)
        await self.session.execute(delete(Installment).where(Installment.payment_plan_id.in_(plan_ids)))
        await self.session.execute(delete(PaymentPlan).where(PaymentPlan.invoice_id == invoice_id))
        await self.session.execute(delete(Payment).where(Payment.invoice_id == invoice_id))
        await self.session.execute(delete(InvoiceLine).where(InvoiceLine.invoice_id == invoice_id))
        await self.session.execute(delete(ReminderLog).where(ReminderLog.invoice_id == invoice_id))
        await self.session.execute(delete(Invoice).where(Invoice.id == invoice_id))
        await self.session.flush()

    async def status_totals(self) -> List[StatusTotals]:
        statement = (
            select(
                Invoice.status,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total_amount), 0),
                func.coalesce(func.sum(Invoice.amount_paid), 0),
            )
            .group_by(Invoice.status)
        )
        result = await self.session.execute(statement)
        return [
            StatusTotals(
                status=InvoiceStatus(status),
                count=count,
                total_amount=Decimal(str(total)),
                amount_paid=Decimal(str(paid)),
            )
            for status, count, total, paid in result.all()
        ]

    async def generate_invoice_number(self, prefix: str, today: date) -> str:
        """
        Generate a unique invoice number

        Format: {prefix}-YYYYMM-NNNN (e.g., INV-202501-0001)

        Returns:
            Unique invoice number string
        """
        period_prefix = f"{prefix}-{today.year}{today.month:02d}-"

        # Highest number issued this month
        statement = (
            select(func.max(Invoice.invoice_number))
            .where(Invoice.invoice_number.like(f"{period_prefix}%"))
        )
        result = await self.session.execute(statement)
        max_number = result.scalar_one_or_none()

        if max_number:
            sequence = int(max_number.split("-")[-1]) + 1
        else:
            sequence = 1

        return f"{period_prefix}{sequence:04d}"
