"""DeleteInvoice Use Case"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.domain.errors import LedgerError, NotFoundError
from receivables.domain.lifecycle import ensure_deletable
from .dtos import DeleteInvoiceResponseDTO

logger = logging.getLogger(__name__)


class DeleteInvoice:
    """
    Use Case: Delete an invoice

    Business Rules:
    1. Only pending invoices can be deleted
    2. Line items, payments, payment plans and reminder logs go with it
    """

    def __init__(self, uow: UnitOfWork, invoice_repo: InvoiceRepository):
        self.uow = uow
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_id: int) -> Result[DeleteInvoiceResponseDTO]:
        """
        Execute invoice deletion

        Args:
            invoice_id: Invoice ID

        Returns:
            Result[DeleteInvoiceResponseDTO]: Success or error

        Errors:
            NOT_FOUND: Invoice does not exist
            INVALID_OPERATION: Invoice is not pending
        """
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)

            ensure_deletable(invoice)

            await self.invoice_repo.delete(invoice.id)
            await self.uow.commit()

            logger.info(f"Deleted invoice {invoice.invoice_number}")
            return Return.ok(
                DeleteInvoiceResponseDTO(invoice_id=invoice_id, invoice_number=invoice.invoice_number)
            )

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_INVOICE_FAILED",
                    message="Failed to delete invoice",
                    reason=str(e),
                )
            )
