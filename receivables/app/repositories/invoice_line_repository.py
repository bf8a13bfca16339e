"""Invoice Line Repository Interface

Defines the contract for invoice line item persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from receivables.domain.invoice_line import InvoiceLine, LineItemKind


class InvoiceLineRepository(ABC):
    """Repository interface for InvoiceLine persistence"""

    @abstractmethod
    async def create(self, invoice_line: InvoiceLine) -> InvoiceLine:
        """
        Create a new invoice line

        Args:
            invoice_line: InvoiceLine entity to persist

        Returns:
            Created InvoiceLine with generated ID
        """
        pass

    @abstractmethod
    async def create_many(self, invoice_lines: List[InvoiceLine]) -> List[InvoiceLine]:
        """
        Create multiple invoice lines in one flush

        Args:
            invoice_lines: InvoiceLine entities to persist

        Returns:
            Created InvoiceLines with generated IDs
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceLine]:
        """
        Retrieve all line items for an invoice, in position order

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceLine entities
        """
        pass

    @abstractmethod
    async def delete_by_invoice_id(self, invoice_id: int, kind: Optional[LineItemKind] = None) -> None:
        """
        Delete the line items of an invoice

        Args:
            invoice_id: Invoice ID
            kind: If given, only delete lines of this kind
        """
        pass

    @abstractmethod
    async def get_latest_by_kind(self, invoice_id: int, kind: LineItemKind) -> Optional[InvoiceLine]:
        """
        Most recently created line of the given kind

        Args:
            invoice_id: Invoice ID
            kind: Line kind (e.g., LATE_FEE)

        Returns:
            InvoiceLine if any exists, None otherwise
        """
        pass
