"""PDF Generation Service Interface

Defines the contract for PDF generation operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from receivables.app.services.client_directory import ClientInfo
from receivables.domain.invoice import Invoice
from receivables.domain.invoice_line import InvoiceLine
from receivables.domain.payment import Payment


class PdfService(ABC):
    """
    Service interface for PDF generation

    Provides PDF generation capabilities for invoices.
    """

    @abstractmethod
    def generate_invoice(
        self,
        invoice: Invoice,
        invoice_lines: List[InvoiceLine],
        payments: List[Payment],
        client: Optional[ClientInfo] = None,
        company_name: str = "Receivables",
    ) -> bytes:
        """
        Generate an invoice PDF

        Args:
            invoice: Invoice entity with billing details
            invoice_lines: Line items for the invoice
            payments: Payments recorded against the invoice
            client: Billed client, if known
            company_name: Company name to display on invoice

        Returns:
            PDF document as bytes
        """
        pass
