"""GenerateInvoicePdf Use Case

Renders an invoice with its lines and payments to PDF.
"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.pdf_service import PdfService
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.domain.errors import NotFoundError
from .dtos import InvoicePdfDTO

logger = logging.getLogger(__name__)


class GenerateInvoicePdf:
    """
    Use Case: Generate an invoice PDF

    Read-only; the invoice is rendered as currently stored.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        payment_repo: PaymentRepository,
        client_directory: ClientDirectory,
        pdf_service: PdfService,
        company_name: str = "Receivables",
    ):
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.payment_repo = payment_repo
        self.client_directory = client_directory
        self.pdf_service = pdf_service
        self.company_name = company_name

    async def execute(self, invoice_id: int) -> Result[InvoicePdfDTO]:
        """
        Execute PDF generation

        Args:
            invoice_id: Invoice ID

        Returns:
            Result[InvoicePdfDTO]: Success with PDF bytes or error

        Errors:
            NOT_FOUND: Invoice does not exist
            PDF_GENERATION_FAILED: Rendering failed
        """
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(NotFoundError("Invoice", invoice_id).to_error())

        try:
            lines = await self.line_repo.get_by_invoice_id(invoice_id)
            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            client = await self.client_directory.find_by_id(invoice.client_id)

            content = self.pdf_service.generate_invoice(
                invoice=invoice,
                invoice_lines=lines,
                payments=payments,
                client=client,
                company_name=self.company_name,
            )
        except Exception as e:
            logger.error(f"PDF generation failed for invoice {invoice.invoice_number}: {e}")
            return Return.err(
                Error(
                    code="PDF_GENERATION_FAILED",
                    message="Failed to generate invoice PDF",
                    reason=str(e),
                )
            )

        return Return.ok(
            InvoicePdfDTO(
                invoice_id=invoice.id,
                filename=f"{invoice.invoice_number}.pdf",
                content=content,
            )
        )
