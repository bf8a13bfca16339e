"""Recurring Invoice Background Worker

Generates invoices for every recurring template whose next date has come.
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
from receivables.adapter.repositories.recurring_template_repository import SqlAlchemyRecurringTemplateRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.clock import SystemClock
from receivables.adapter.services.notifier import create_notifier
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.use_cases.recurring import (
    GenerateRecurringInvoice,
    ProcessDueRecurringInvoices,
    ProcessDueResultDTO,
)

logger = logging.getLogger(__name__)


class RecurringInvoiceWorker:
    """
    Background worker for recurring invoice generation

    Features:
    - Runs hourly by default; a template generates at most once per day
    - Each template is generated in its own transaction
    - Can run once or continuously

    Usage:
        # Run once
        worker = RecurringInvoiceWorker()
        result = await worker.run_once()

        # Run continuously
        worker = RecurringInvoiceWorker()
        await worker.run_forever(interval_seconds=3600)
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

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        self.notifier = create_notifier(webhook_url or ApplicationConfig.NOTIFIER_WEBHOOK_URL)

        logger.info("RecurringInvoiceWorker initialized")

    async def run_once(self) -> ProcessDueResultDTO:
        """
        Generate every due recurring invoice once

        Returns:
            ProcessDueResultDTO with per-template outcomes
        """
        if not ApplicationConfig.RECURRING_ENABLED:
            logger.info("Recurring invoice generation is disabled, skipping")
            return ProcessDueResultDTO(
                run_date=self.clock.today(), processed=0, succeeded=0, failed=0, results=[]
            )

        async with self.async_session_factory() as session:
            template_repo = SqlAlchemyRecurringTemplateRepository(session)
            generate_invoice = GenerateRecurringInvoice(
                uow=SqlAlchemyUnitOfWork(session),
                template_repo=template_repo,
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                line_repo=SqlAlchemyInvoiceLineRepository(session),
                client_directory=SqlClientDirectory(session),
                notifier=self.notifier,
                clock=self.clock,
                invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
                company_name=ApplicationConfig.COMPANY_NAME,
            )

            use_case = ProcessDueRecurringInvoices(
                template_repo=template_repo,
                generate_invoice=generate_invoice,
                clock=self.clock,
            )

            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Recurring run failed: {result.error.message}")
                raise RuntimeError(f"Recurring run failed: {result.error.message}")

            response = result.value
            for run in response.results:
                if not run.success:
                    logger.error(f"  - Template {run.template_id}: {run.error}")
            return response

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run generation continuously at specified interval

        Args:
            interval_seconds: Seconds between runs (default: 1 hour)
        """
        logger.info(f"Starting recurring invoice generation with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Recurring cycle complete. Processed {result.processed} templates, "
                    f"{result.succeeded} succeeded, {result.failed} failed"
                )
            except Exception as e:
                logger.error(f"Recurring cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("RecurringInvoiceWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m receivables.worker.recurring_invoices --once

        # Run continuously with custom interval (in seconds)
        python -m receivables.worker.recurring_invoices --interval 600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Recurring Invoice Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECURRING_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: RECURRING_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = RecurringInvoiceWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Recurring run complete:")
            print(f"  Run date: {result.run_date.isoformat()}")
            print(f"  Templates processed: {result.processed}")
            print(f"  Succeeded: {result.succeeded}")
            print(f"  Failed: {result.failed}")
            for run in result.results:
                if run.success:
                    print(f"  - Template {run.template_id}: invoice {run.invoice_number}")
                else:
                    print(f"  - Template {run.template_id}: FAILED {run.error}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
