"""CreateInvoice Use Case

Validates and persists a new invoice with its line items.
"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.clock import Clock
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.use_cases.line_items import parse_line_items, build_invoice_lines
from receivables.domain.errors import LedgerError, ValidationError
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.lifecycle import calculate_totals
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create an invoice

    Business Rules:
    1. client_id must reference an existing client
    2. due_date is required
    3. At least one line item with a description and non-negative
       numeric quantity, unit price and tax rate
    4. Every violation is reported in a single ValidationError
    5. Invoice number is generated (INV-YYYYMM-NNNN) unless supplied
    6. Status is pending unless draft is requested

    Flow:
    1. Validate input and client
    2. Price line items and compute totals
    3. Assign invoice number
    4. Persist invoice and lines
    5. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        client_directory: ClientDirectory,
        clock: Clock,
        invoice_number_prefix: str = "INV",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.client_directory = client_directory
        self.clock = clock
        self.invoice_number_prefix = invoice_number_prefix

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with client, due date and items

        Returns:
            Result[InvoiceResponseDTO]: Success with invoice details or error

        Errors:
            VALIDATION_ERROR: One or more fields are invalid (see details)
            CREATE_INVOICE_FAILED: Unexpected persistence failure
        """
        try:
            errors = []

            if command.client_id is None:
                errors.append("client_id is required")
            else:
                client = await self.client_directory.find_by_id(command.client_id)
                if client is None:
                    errors.append(f"client_id: client {command.client_id} not found")

            if command.due_date is None:
                errors.append("due_date is required")

            status = command.status or InvoiceStatus.PENDING
            if status not in (InvoiceStatus.PENDING, InvoiceStatus.DRAFT):
                errors.append("status must be pending or draft")

            parsed_items, item_errors = parse_line_items(command.items)
            errors.extend(item_errors)

            invoice_number = (command.invoice_number or "").strip()
            if invoice_number:
                existing = await self.invoice_repo.get_by_invoice_number(invoice_number)
                if existing:
                    errors.append(f"invoice_number: {invoice_number} already exists")

            if errors:
                raise ValidationError(errors, message="Invalid invoice data")

            # Price lines before the invoice exists so totals go in with the insert
            lines = build_invoice_lines(parsed_items, invoice_id=0)
            subtotal, tax_total, total = calculate_totals(lines)

            if not invoice_number:
                invoice_number = await self.invoice_repo.generate_invoice_number(
                    self.invoice_number_prefix, self.clock.today()
                )

            invoice = Invoice(
                client_id=command.client_id,
                estimate_id=command.estimate_id,
                invoice_number=invoice_number,
                title=command.title,
                description=command.description,
                status=status,
                currency=command.currency,
                subtotal=subtotal,
                tax_total=tax_total,
                total_amount=total,
                due_date=command.due_date,
            )
            created_invoice = await self.invoice_repo.create(invoice)

            for line in lines:
                line.invoice_id = created_invoice.id
            created_lines = await self.line_repo.create_many(lines)

            await self.uow.commit()

            logger.info(
                f"Created invoice {created_invoice.invoice_number} for client {created_invoice.client_id}, "
                f"total={created_invoice.total_amount}"
            )
            return Return.ok(InvoiceResponseDTO.from_entity(created_invoice, created_lines))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create invoice: {e}")
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
