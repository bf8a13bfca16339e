"""UpdateInvoice Use Case

Applies a partial update to an invoice, re-pricing line items when they
change.
"""

import logging
from decimal import Decimal
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.use_cases.line_items import parse_line_items, build_invoice_lines
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError, InvalidOperationError
from receivables.domain.invoice import InvoiceStatus
from receivables.domain.invoice_line import LineItemKind
from receivables.domain.lifecycle import (
    apply_totals,
    ensure_editable,
    ensure_transition,
    recompute_status,
)
from .dtos import UpdateInvoiceCommandDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)


class UpdateInvoice:
    """
    Use Case: Update an invoice

    Business Rules:
    1. Paid and canceled invoices cannot be modified
    2. Supplying items replaces the standard lines; late fees are kept
    3. The new total may not drop below amount_paid
    4. Explicit status changes must be legal transitions
    5. Status is re-derived after every change

    Flow:
    1. Load invoice with lock
    2. Validate patch
    3. Replace lines and recompute totals
    4. Apply explicit transition, then recompute status
    5. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        clock: Clock,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.clock = clock

    async def execute(self, invoice_id: int, command: UpdateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)

            ensure_editable(invoice)

            errors = []
            parsed_items = None
            if command.items is not None:
                parsed_items, item_errors = parse_line_items(command.items)
                errors.extend(item_errors)
            if command.title is not None and not command.title.strip():
                errors.append("title cannot be empty")
            if errors:
                raise ValidationError(errors, message="Invalid invoice data")

            if command.title is not None:
                invoice.title = command.title
            if command.description is not None:
                invoice.description = command.description
            if command.due_date is not None:
                invoice.due_date = command.due_date
            if command.currency is not None:
                invoice.currency = command.currency

            if parsed_items is not None:
                kept = [
                    line for line in await self.line_repo.get_by_invoice_id(invoice.id)
                    if line.kind == LineItemKind.LATE_FEE
                ]
                new_lines = build_invoice_lines(parsed_items, invoice_id=invoice.id)
                apply_totals(invoice, new_lines + kept)

                if invoice.total_amount < Decimal(invoice.amount_paid):
                    raise InvalidOperationError(
                        "Invoice total cannot be lower than the amount already paid",
                        reason=f"total={invoice.total_amount}, amount_paid={invoice.amount_paid}",
                    )

                await self.line_repo.delete_by_invoice_id(invoice.id, kind=LineItemKind.STANDARD)
                for position, line in enumerate(kept, start=len(new_lines)):
                    line.position = position
                await self.line_repo.create_many(new_lines)

            now = self.clock.now()
            if command.status is not None:
                ensure_transition(invoice.status, command.status)
                if command.status != invoice.status:
                    invoice.status = command.status
                    if command.status == InvoiceStatus.SENT and invoice.sent_at is None:
                        invoice.sent_at = now

            recompute_status(invoice, self.clock.today(), now)
            updated_invoice = await self.invoice_repo.update(invoice)
            lines = await self.line_repo.get_by_invoice_id(invoice.id)

            await self.uow.commit()

            logger.info(f"Updated invoice {updated_invoice.invoice_number}, status={updated_invoice.status.value}")
            return Return.ok(InvoiceResponseDTO.from_entity(updated_invoice, lines))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to update invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_FAILED",
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )
