"""Overdue Escalation Background Worker

Daily sweep over past-due invoices: marks them overdue, sends reminders,
applies automatic late fees and reminds clients of upcoming installments.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.overdue_config_repository import SqlAlchemyOverdueConfigRepository
from receivables.adapter.repositories.payment_plan_repository import SqlAlchemyPaymentPlanRepository
from receivables.adapter.repositories.reminder_log_repository import SqlAlchemyReminderLogRepository
from receivables.adapter.repositories.reminder_template_repository import SqlAlchemyReminderTemplateRepository
from receivables.adapter.services.cache import create_cache
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.clock import SystemClock
from receivables.adapter.services.notifier import create_notifier
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.use_cases.overdue import (
    LateFeeApplier,
    ProcessOverdueInvoices,
    ProcessOverdueResultDTO,
    ReminderSender,
)
from receivables.app.use_cases.payments import InstallmentReminderResultDTO, SendInstallmentReminders

logger = logging.getLogger(__name__)


class OverdueInvoiceWorker:
    """
    Background worker for overdue escalation

    Features:
    - Runs daily by default
    - Each invoice is processed in its own transaction; one failure
      does not stop the sweep
    - Installment reminders for installments due within
      INSTALLMENT_REMINDER_DAYS_AHEAD days
    - Can run once or continuously

    Usage:
        # Run once
        worker = OverdueInvoiceWorker()
        result = await worker.run_once()

        # Run continuously
        worker = OverdueInvoiceWorker()
        await worker.run_forever(interval_seconds=86400)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        webhook_url: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            webhook_url: Notification webhook URL (defaults to config)
            clock: Source of today's date (defaults to the system clock)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.clock = clock or SystemClock()
        self.days_ahead = ApplicationConfig.INSTALLMENT_REMINDER_DAYS_AHEAD

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        self.notifier = create_notifier(webhook_url or ApplicationConfig.NOTIFIER_WEBHOOK_URL)
        self.cache = create_cache(ApplicationConfig.CACHE_BACKEND, ApplicationConfig.REDIS_URL)

        logger.info(f"OverdueInvoiceWorker initialized with days_ahead={self.days_ahead}")

    async def run_once(self) -> ProcessOverdueResultDTO:
        """
        Run the overdue sweep and installment reminders once

        Returns:
            ProcessOverdueResultDTO with the sweep counters
        """
        if not ApplicationConfig.OVERDUE_ENABLED:
            logger.info("Overdue processing is disabled, skipping")
            return ProcessOverdueResultDTO(run_date=self.clock.today())

        async with self.async_session_factory() as session:
            invoice_repo = SqlAlchemyInvoiceRepository(session)
            line_repo = SqlAlchemyInvoiceLineRepository(session)
            log_repo = SqlAlchemyReminderLogRepository(session)

            sender = ReminderSender(
                template_repo=SqlAlchemyReminderTemplateRepository(session),
                log_repo=log_repo,
                client_directory=SqlClientDirectory(session),
                notifier=self.notifier,
                clock=self.clock,
                company_name=ApplicationConfig.COMPANY_NAME,
            )
            use_case = ProcessOverdueInvoices(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=invoice_repo,
                line_repo=line_repo,
                config_repo=SqlAlchemyOverdueConfigRepository(session),
                log_repo=log_repo,
                sender=sender,
                applier=LateFeeApplier(invoice_repo, line_repo, self.clock),
                clock=self.clock,
                cache=self.cache,
            )

            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Overdue run failed: {result.error.message}")
                raise RuntimeError(f"Overdue run failed: {result.error.message}")

            response = result.value
            for error in response.errors:
                logger.error(f"  - Invoice {error.invoice_id}: {error.error}")

        await self.run_installment_reminders()
        return response

    async def run_installment_reminders(self) -> Optional[InstallmentReminderResultDTO]:
        """Remind clients of installments coming due; failures are logged only"""
        async with self.async_session_factory() as session:
            use_case = SendInstallmentReminders(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                plan_repo=SqlAlchemyPaymentPlanRepository(session),
                client_directory=SqlClientDirectory(session),
                notifier=self.notifier,
                clock=self.clock,
                company_name=ApplicationConfig.COMPANY_NAME,
            )
            result = await use_case.execute(days_ahead=self.days_ahead)

            if result.is_err():
                logger.error(f"Installment reminders failed: {result.error.message}")
                return None

            response = result.value
            logger.info(
                f"Installment reminders: checked {response.checked}, "
                f"sent {response.reminders_sent}, failed {response.failed}"
            )
            return response

    async def run_forever(self, interval_seconds: int = 86400):
        """
        Run the sweep continuously at specified interval

        Args:
            interval_seconds: Seconds between runs (default: 24 hours)
        """
        logger.info(f"Starting overdue processing with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Overdue cycle complete. Checked {result.checked} invoices, "
                    f"marked {result.marked_overdue} overdue, sent {result.reminders_sent} reminders, "
                    f"applied {result.late_fees_applied} late fees, {result.failed} failed"
                )
            except Exception as e:
                logger.error(f"Overdue cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("OverdueInvoiceWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m receivables.worker.overdue_invoices --once

        # Run continuously (default: daily)
        python -m receivables.worker.overdue_invoices
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Overdue Escalation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.OVERDUE_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 86400 = 24 hours)"
    )
    args = parser.parse_args()

    worker = OverdueInvoiceWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Overdue run complete:")
            print(f"  Invoices checked: {result.checked}")
            print(f"  Marked overdue: {result.marked_overdue}")
            print(f"  Reminders sent: {result.reminders_sent} ({result.reminders_failed} failed)")
            print(f"  Late fees applied: {result.late_fees_applied}")
            if result.errors:
                print("\nFailures:")
                for error in result.errors:
                    print(f"  - Invoice {error.invoice_id}: {error.error}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
