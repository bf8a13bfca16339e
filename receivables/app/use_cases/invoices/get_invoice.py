"""Get Invoice Use Cases

Read-only invoice lookups.
"""

from receivables.libs.result import Result, Return
from receivables.app.repositories.invoice_repository import InvoiceRepository, InvoiceFilter
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.domain.errors import NotFoundError
from .dtos import InvoiceResponseDTO, ListInvoicesQueryDTO


class GetInvoice:
    """
    Get Invoice Use Case

    Returns one invoice with its line items.
    """

    def __init__(self, invoice_repo: InvoiceRepository, line_repo: InvoiceLineRepository):
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice lookup

        Args:
            invoice_id: Invoice ID

        Returns:
            Result[InvoiceResponseDTO]: Success with invoice or error

        Errors:
            NOT_FOUND: Invoice does not exist
        """
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(NotFoundError("Invoice", invoice_id).to_error())

        lines = await self.line_repo.get_by_invoice_id(invoice_id)
        return Return.ok(InvoiceResponseDTO.from_entity(invoice, lines))


class ListInvoices:
    """
    List Invoices Use Case

    Filtered, paginated listing. Finding nothing is not an error.
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, query: ListInvoicesQueryDTO) -> Result[list]:
        invoices = await self.invoice_repo.list(
            InvoiceFilter(
                client_id=query.client_id,
                status=query.status,
                created_from=query.created_from,
                created_to=query.created_to,
                due_from=query.due_from,
                due_to=query.due_to,
                limit=query.limit,
                offset=query.offset,
            )
        )
        return Return.ok([InvoiceResponseDTO.from_entity(invoice) for invoice in invoices])
