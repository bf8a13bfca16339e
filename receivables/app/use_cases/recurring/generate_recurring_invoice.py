"""GenerateRecurringInvoice Use Case

Turns one recurring template into a concrete invoice.
"""

import logging
from datetime import timedelta
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.repositories.recurring_template_repository import RecurringTemplateRepository
from receivables.app.use_cases.invoices.transitions import email_invoice
from receivables.app.use_cases.line_items import ParsedLineItem, build_invoice_lines
from receivables.domain.errors import LedgerError, NotFoundError, InvalidOperationError
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.lifecycle import calculate_totals
from receivables.domain.recurring_template import RecurringInvoiceHistory, RecurringStatus
from receivables.domain.schedule import next_occurrence, is_past_end
from .dtos import GenerateInvoiceResultDTO

logger = logging.getLogger(__name__)


class GenerateRecurringInvoice:
    """
    Use Case: Generate the next invoice of a recurring template

    Business Rules:
    1. Only active templates generate invoices
    2. Invoice copies the template items; due date = today + due_days
    3. One history row links template and invoice
    4. next_date advances by one period, and further until it is after
       today, so missed periods are skipped rather than back-filled
    5. Advancing beyond end_date completes the template
    6. auto_send marks the invoice sent and emails the client after commit

    Flow:
    1. Lock template
    2. Price items and create invoice with lines
    3. Record history and advance schedule
    4. Commit transaction
    5. Email client (best-effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        template_repo: RecurringTemplateRepository,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        client_directory: ClientDirectory,
        notifier: Notifier,
        clock: Clock,
        invoice_number_prefix: str = "INV",
        company_name: str = "Receivables",
    ):
        self.uow = uow
        self.template_repo = template_repo
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.client_directory = client_directory
        self.notifier = notifier
        self.clock = clock
        self.invoice_number_prefix = invoice_number_prefix
        self.company_name = company_name

    async def execute(self, template_id: int) -> Result[GenerateInvoiceResultDTO]:
        """
        Execute invoice generation

        Args:
            template_id: Recurring template to generate from

        Returns:
            Result[GenerateInvoiceResultDTO]: Generated invoice and new schedule

        Errors:
            NOT_FOUND: Template does not exist
            INVALID_OPERATION: Template is not active
            GENERATE_RECURRING_INVOICE_FAILED: Unexpected failure
        """
        try:
            template = await self.template_repo.get_by_id(template_id, for_update=True)
            if not template:
                raise NotFoundError("Recurring template", template_id)
            if template.status != RecurringStatus.ACTIVE:
                raise InvalidOperationError(
                    f"Cannot generate from a {template.status.value} recurring template",
                    reason="only active templates generate invoices",
                )

            today = self.clock.today()
            now = self.clock.now()
            scheduled_date = template.next_date

            items = await self.template_repo.get_items(template.id)
            parsed = [
                ParsedLineItem(item.description, item.quantity, item.unit_price, item.tax_rate)
                for item in sorted(items, key=lambda i: i.position)
            ]
            lines = build_invoice_lines(parsed, invoice_id=0)
            subtotal, tax_total, total = calculate_totals(lines)

            invoice_number = await self.invoice_repo.generate_invoice_number(self.invoice_number_prefix, today)
            invoice = await self.invoice_repo.create(
                Invoice(
                    client_id=template.client_id,
                    invoice_number=invoice_number,
                    title=template.title,
                    description=template.description,
                    status=InvoiceStatus.SENT if template.auto_send else InvoiceStatus.PENDING,
                    subtotal=subtotal,
                    tax_total=tax_total,
                    total_amount=total,
                    due_date=today + timedelta(days=template.due_days),
                    sent_at=now if template.auto_send else None,
                )
            )
            for line in lines:
                line.invoice_id = invoice.id
            await self.line_repo.create_many(lines)

            await self.template_repo.add_history(
                RecurringInvoiceHistory(
                    template_id=template.id,
                    invoice_id=invoice.id,
                    scheduled_date=scheduled_date,
                )
            )

            next_date = next_occurrence(scheduled_date, template.frequency, template.interval, template.anchor_day)
            while next_date <= today:
                next_date = next_occurrence(next_date, template.frequency, template.interval, template.anchor_day)
            template.next_date = next_date
            if is_past_end(next_date, template.end_date):
                template.status = RecurringStatus.COMPLETED
            template.updated_at = now
            template = await self.template_repo.update(template)

            await self.uow.commit()

            logger.info(
                f"Generated invoice {invoice.invoice_number} from recurring template {template.id}, "
                f"next run {template.next_date} ({template.status.value})"
            )

            email_sent = False
            if template.auto_send:
                email_sent = await email_invoice(self.notifier, self.client_directory, invoice, self.company_name)

            return Return.ok(
                GenerateInvoiceResultDTO(
                    template_id=template.id,
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    total_amount=invoice.total_amount,
                    due_date=invoice.due_date,
                    next_date=template.next_date,
                    template_status=template.status.value,
                    email_sent=email_sent,
                    notification_failed=template.auto_send and not email_sent,
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to generate invoice from recurring template {template_id}: {e}")
            return Return.err(
                Error(
                    code="GENERATE_RECURRING_INVOICE_FAILED",
                    message="Failed to generate recurring invoice",
                    reason=str(e),
                )
            )
