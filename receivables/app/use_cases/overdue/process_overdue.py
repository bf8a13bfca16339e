"""ProcessOverdueInvoices Use Case

The daily escalation sweep.
"""

import logging
from typing import Optional
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.cache import Cache
from receivables.app.services.clock import Clock
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.repositories.overdue_config_repository import OverdueConfigRepository
from receivables.app.repositories.reminder_log_repository import ReminderLogRepository
from receivables.domain.escalation import compute_late_fee, days_overdue, late_fee_due, should_send_reminder
from receivables.domain.invoice import COLLECTIBLE_STATUSES, OPEN_STATUSES, InvoiceStatus
from receivables.domain.invoice_line import LineItemKind
from receivables.domain.lifecycle import recompute_status
from receivables.domain.overdue import OverdueConfig
from .escalation import ReminderSender, LateFeeApplier
from .dtos import ProcessOverdueResultDTO, InvoiceRunErrorDTO

logger = logging.getLogger(__name__)

STATISTICS_CACHE_KEY = "overdue:statistics"


class ProcessOverdueInvoices:
    """
    Use Case: Escalate every past-due invoice

    Business Rules:
    1. Candidates: sent, partial or overdue, due before today, balance left
    2. Unpaid sent invoices become overdue; partial invoices keep partial
    3. Reminder and late fee policies are evaluated independently
    4. Status, reminder and late fee commit separately per invoice; a
       failure is recorded and the sweep moves on
    5. Eligibility comes from persisted logs and fee lines, so a second
       run on the same day does nothing new
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        config_repo: OverdueConfigRepository,
        log_repo: ReminderLogRepository,
        sender: ReminderSender,
        applier: LateFeeApplier,
        clock: Clock,
        cache: Optional[Cache] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.config_repo = config_repo
        self.log_repo = log_repo
        self.sender = sender
        self.applier = applier
        self.clock = clock
        self.cache = cache

    async def execute(self) -> Result[ProcessOverdueResultDTO]:
        today = self.clock.today()
        try:
            candidates = await self.invoice_repo.list_past_due(today, COLLECTIBLE_STATUSES)
            invoice_ids = [invoice.id for invoice in candidates]
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to load overdue candidates: {e}")
            return Return.err(
                Error(
                    code="PROCESS_OVERDUE_FAILED",
                    message="Failed to load overdue invoices",
                    reason=str(e),
                )
            )

        logger.info(f"Processing {len(invoice_ids)} past-due invoices for {today}")
        summary = ProcessOverdueResultDTO(run_date=today, checked=len(invoice_ids))

        for invoice_id in invoice_ids:
            try:
                await self._process_invoice(invoice_id, summary)
            except Exception as e:
                await self.uow.rollback()
                logger.error(f"Overdue processing failed for invoice {invoice_id}: {e}")
                summary.failed += 1
                summary.errors.append(InvoiceRunErrorDTO(invoice_id=invoice_id, error=str(e)))

        if self.cache is not None:
            try:
                await self.cache.delete(STATISTICS_CACHE_KEY)
            except Exception as e:
                logger.warning(f"Could not invalidate overdue statistics cache: {e}")

        logger.info(
            f"Overdue sweep done: checked={summary.checked}, marked_overdue={summary.marked_overdue}, "
            f"reminders_sent={summary.reminders_sent}, late_fees={summary.late_fees_applied}, failed={summary.failed}"
        )
        return Return.ok(summary)

    async def _process_invoice(self, invoice_id: int, summary: ProcessOverdueResultDTO) -> None:
        """
        Run the three escalation steps for one invoice

        Status, reminder and late fee each commit on their own, so a
        failing fee never takes the reminder log with it. The reminder
        email goes out after the invoice lock is released.
        """
        today = self.clock.today()
        config = await self.config_repo.get()

        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice or invoice.status not in COLLECTIBLE_STATUSES or invoice.remaining_balance <= 0:
            await self.uow.rollback()
            return

        previous = invoice.status
        recompute_status(invoice, today, self.clock.now())
        changed = invoice.status != previous
        if changed:
            invoice.updated_at = self.clock.now()
            await self.invoice_repo.update(invoice)
        await self.uow.commit()
        if changed and invoice.status == InvoiceStatus.OVERDUE:
            summary.marked_overdue += 1

        overdue_days = days_overdue(invoice.due_date, today)

        logs = await self.log_repo.get_by_invoice_id(invoice.id)
        decision = should_send_reminder(overdue_days, logs, config, today)
        if decision.send:
            log = await self.sender.send(invoice, decision.tier, config)
            await self.uow.commit()
            if log.success:
                summary.reminders_sent += 1
            else:
                summary.reminders_failed += 1
            await self.sender.notify(invoice, log)

        await self._apply_late_fee(invoice_id, config, summary)

    async def _apply_late_fee(self, invoice_id: int, config: OverdueConfig, summary: ProcessOverdueResultDTO) -> None:
        today = self.clock.today()
        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice or invoice.status not in OPEN_STATUSES:
            await self.uow.rollback()
            return

        overdue_days = days_overdue(invoice.due_date, today)
        last_fee = await self.line_repo.get_latest_by_kind(invoice.id, LineItemKind.LATE_FEE)
        if not late_fee_due(overdue_days, last_fee.created_at if last_fee else None, config, today):
            await self.uow.rollback()
            return

        if compute_late_fee(invoice.total_amount, config) <= 0:
            await self.uow.rollback()
            logger.warning(f"Late fee for invoice {invoice.invoice_number} rounds to zero, skipped")
            return

        await self.applier.apply(invoice, config)
        await self.uow.commit()
        summary.late_fees_applied += 1
