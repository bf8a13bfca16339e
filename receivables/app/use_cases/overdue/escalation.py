"""Escalation actions shared by the overdue use cases

Nothing here commits; callers own the unit of work.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import EmailMessage, Notification, Notifier
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.repositories.reminder_log_repository import ReminderLogRepository
from receivables.app.repositories.reminder_template_repository import ReminderTemplateRepository
from receivables.domain.errors import InvalidOperationError, ValidationError
from receivables.domain.escalation import compute_late_fee, days_overdue, render_placeholders
from receivables.domain.invoice import Invoice, OPEN_STATUSES
from receivables.domain.invoice_line import InvoiceLine, LineItemKind, LATE_FEE_DESCRIPTION
from receivables.domain.lifecycle import apply_totals, parse_decimal, recompute_status
from receivables.domain.overdue import LateFeeType, OverdueConfig, ReminderLog, ReminderTemplate, ReminderTier

logger = logging.getLogger(__name__)


def parse_tier(value: Optional[str], errors: List[str], field: str = "tier") -> Optional[ReminderTier]:
    if value is None:
        return None
    try:
        return ReminderTier(value.lower())
    except ValueError:
        errors.append(f"{field} must be one of: " + ", ".join(t.value for t in ReminderTier))
        return None


def parse_fee_type(value: Optional[str], errors: List[str], field: str = "type") -> Optional[LateFeeType]:
    if value is None:
        return None
    try:
        return LateFeeType(value.lower())
    except ValueError:
        errors.append(f"{field} must be one of: " + ", ".join(t.value for t in LateFeeType))
        return None


class ReminderSender:
    """
    Renders, sends and logs payment reminders

    Every attempt is logged, including those that never reach the
    notifier, so escalation sees the full history.
    """

    def __init__(
        self,
        template_repo: ReminderTemplateRepository,
        log_repo: ReminderLogRepository,
        client_directory: ClientDirectory,
        notifier: Notifier,
        clock: Clock,
        company_name: str = "Receivables",
    ):
        self.template_repo = template_repo
        self.log_repo = log_repo
        self.client_directory = client_directory
        self.notifier = notifier
        self.clock = clock
        self.company_name = company_name

    async def send(
        self,
        invoice: Invoice,
        tier: ReminderTier,
        config: OverdueConfig,
        template: Optional[ReminderTemplate] = None,
    ) -> ReminderLog:
        """
        Send one reminder and append its log row

        Args:
            invoice: Past-due invoice
            tier: Escalation tier of the reminder
            config: Overdue configuration, for the late fee figure
            template: Explicit template; the tier default otherwise

        Returns:
            The persisted ReminderLog
        """
        if template is None:
            template = await self.template_repo.get_default_for_tier(tier)

        client = await self.client_directory.find_by_id(invoice.client_id)
        success = False
        error_message = None

        if template is None:
            error_message = f"No reminder template for tier {tier.value}"
        elif not client or not client.email:
            error_message = f"No email on file for client {invoice.client_id}"
        else:
            fields = {
                "client_name": client.name,
                "invoice_number": invoice.invoice_number,
                "due_date": invoice.due_date.isoformat(),
                "total_amount": f"{invoice.total_amount} {invoice.currency}",
                "balance_due": f"{invoice.remaining_balance} {invoice.currency}",
                "days_overdue": days_overdue(invoice.due_date, self.clock.today()),
                "late_fee_amount": f"{compute_late_fee(invoice.total_amount, config)} {invoice.currency}",
                "company_name": self.company_name,
            }
            try:
                result = await self.notifier.send_email(
                    EmailMessage(
                        to=client.email,
                        subject=render_placeholders(template.subject, fields),
                        body=render_placeholders(template.body, fields),
                        template=f"reminder_{tier.value}",
                        template_data={key: str(value) for key, value in fields.items()},
                    )
                )
                success = result.success
                error_message = result.error
            except Exception as e:
                error_message = str(e)

        if not success:
            logger.warning(f"Reminder ({tier.value}) for invoice {invoice.invoice_number} failed: {error_message}")

        log = await self.log_repo.create(
            ReminderLog(
                invoice_id=invoice.id,
                template_id=template.id if template else None,
                tier=tier,
                sent_at=self.clock.now(),
                success=success,
                error_message=None if success else error_message,
            )
        )
        return log

    async def notify(self, invoice: Invoice, log: ReminderLog) -> bool:
        """
        In-app notification about a reminder attempt

        Returns:
            True if the notification failed
        """
        try:
            outcome = "sent" if log.success else "failed"
            await self.notifier.create_notification(
                Notification(
                    type="reminder_sent" if log.success else "reminder_failed",
                    title=f"Payment Reminder {outcome.capitalize()}",
                    message=f"{log.tier.value.capitalize()} reminder {outcome} for invoice #{invoice.invoice_number}",
                    entity_id=invoice.id,
                    entity_type="invoice",
                )
            )
            return False
        except Exception as e:
            logger.warning(f"Reminder notification failed for invoice {invoice.invoice_number}: {e}")
            return True


class LateFeeApplier:
    """Appends late fee lines and re-totals the invoice"""

    def __init__(self, invoice_repo: InvoiceRepository, line_repo: InvoiceLineRepository, clock: Clock):
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.clock = clock

    async def apply(
        self,
        invoice: Invoice,
        config: OverdueConfig,
        amount=None,
        fee_type: Optional[str] = None,
    ) -> InvoiceLine:
        """
        Add a late fee to an open invoice

        Args:
            invoice: Locked invoice
            config: Overdue configuration supplying defaults
            amount: Override of the configured percent or amount
            fee_type: Override of the configured fee type

        Returns:
            The created late fee line; the invoice is updated in place

        Raises:
            InvalidOperationError: invoice is not open
            ValidationError: invalid overrides or a zero fee
        """
        if invoice.status not in OPEN_STATUSES:
            raise InvalidOperationError(
                f"Cannot apply a late fee to a {invoice.status.value} invoice",
                reason=f"invoice {invoice.invoice_number} is not open",
            )

        errors: List[str] = []
        parsed_type = parse_fee_type(fee_type, errors)
        parsed_amount = None
        if amount is not None and amount != "":
            try:
                parsed_amount = parse_decimal(amount)
                if parsed_amount <= 0:
                    errors.append("amount must be greater than 0")
            except ValueError:
                errors.append("amount must be a number")
        if errors:
            raise ValidationError(errors, message="Invalid late fee")

        fee = compute_late_fee(invoice.total_amount, config, amount=parsed_amount, fee_type=parsed_type)
        if fee <= 0:
            raise ValidationError(["late fee rounds to zero"], message="Invalid late fee")

        existing = await self.line_repo.get_by_invoice_id(invoice.id)
        line = await self.line_repo.create(
            InvoiceLine(
                invoice_id=invoice.id,
                description=LATE_FEE_DESCRIPTION,
                quantity=Decimal("1"),
                unit_price=fee,
                tax_rate=Decimal("0"),
                amount=fee,
                tax_amount=Decimal("0.00"),
                kind=LineItemKind.LATE_FEE,
                position=len(existing),
                created_at=self.clock.now(),
            )
        )

        apply_totals(invoice, list(existing) + [line])
        recompute_status(invoice, self.clock.today(), self.clock.now())
        invoice.updated_at = self.clock.now()
        await self.invoice_repo.update(invoice)

        logger.info(f"Applied late fee of {fee} to invoice {invoice.invoice_number}, new total {invoice.total_amount}")
        return line
