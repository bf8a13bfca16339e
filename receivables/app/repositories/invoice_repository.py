"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional
from receivables.domain.invoice import Invoice, InvoiceStatus


@dataclass
class InvoiceFilter:
    """Optional filters for listing invoices"""

    client_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    limit: int = 50
    offset: int = 0


@dataclass
class StatusTotals:
    """Aggregate of invoices sharing one status"""

    status: InvoiceStatus
    count: int
    total_amount: Decimal
    amount_paid: Decimal


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Provides access to invoice data for lifecycle, payment and escalation
    operations.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row (SELECT FOR UPDATE) until commit

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        """
        Retrieve invoice by invoice number

        Args:
            invoice_number: Unique invoice number

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(self, filters: InvoiceFilter) -> List[Invoice]:
        """
        List invoices matching the filters, newest first

        Args:
            filters: InvoiceFilter with optional criteria and pagination

        Returns:
            List of invoices (empty when nothing matches)
        """
        pass

    @abstractmethod
    async def list_past_due(
        self,
        today: date,
        statuses: Iterable[InvoiceStatus],
        client_id: Optional[int] = None,
    ) -> List[Invoice]:
        """
        Invoices due before today with a positive remaining balance

        Args:
            today: Current date
            statuses: Statuses to include
            client_id: Optional client filter

        Returns:
            Invoices ordered by due date, oldest first
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def delete(self, invoice_id: int) -> None:
        """
        Delete an invoice with its line items, payments, payment plans
        and reminder logs

        Args:
            invoice_id: Invoice ID
        """
        pass

    @abstractmethod
    async def status_totals(self) -> List[StatusTotals]:
        """
        Count and sum invoices grouped by status

        Returns:
            One StatusTotals per status present
        """
        pass

    @abstractmethod
    async def generate_invoice_number(self, prefix: str, today: date) -> str:
        """
        Generate the next invoice number for the month

        Format: {prefix}-YYYYMM-NNNN (e.g., INV-202501-0001)

        Args:
            prefix: Number prefix (e.g., "INV")
            today: Date whose year and month scope the sequence

        Returns:
            Unique invoice number string
        """
        pass
