"""Integration tests for the overdue sweep against a real database

Covers reminder logs surviving a failed late fee step and the sweep
staying quiet on the following days.
"""

import pytest
from datetime import date
from decimal import Decimal

from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.overdue_config_repository import SqlAlchemyOverdueConfigRepository
from receivables.adapter.repositories.reminder_log_repository import SqlAlchemyReminderLogRepository
from receivables.adapter.repositories.reminder_template_repository import SqlAlchemyReminderTemplateRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.notifier import LoggingNotifier
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.use_cases.invoices import CreateInvoice, CreateInvoiceCommandDTO, LineItemDTO
from receivables.app.use_cases.invoices.transitions import SendInvoice
from receivables.app.use_cases.overdue import LateFeeApplier, ProcessOverdueInvoices, ReminderSender
from receivables.domain.invoice import InvoiceStatus


class UnavailableLateFeeApplier(LateFeeApplier):
    """Late fee step whose writes always fail"""

    async def apply(self, invoice, config, amount=None, fee_type=None):
        raise RuntimeError("late fee line could not be written")


async def _past_due_invoice(db_session, clock, client_id):
    create = CreateInvoice(
        SqlAlchemyUnitOfWork(db_session),
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyInvoiceLineRepository(db_session),
        SqlClientDirectory(db_session),
        clock,
    )
    created = await create.execute(
        CreateInvoiceCommandDTO(
            client_id=client_id,
            due_date=date(2025, 2, 20),
            title="February services",
            items=[LineItemDTO(description="Consulting hours", quantity="10", unit_price="100.00")],
        )
    )
    assert created.is_ok()

    send = SendInvoice(
        SqlAlchemyUnitOfWork(db_session),
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyInvoiceLineRepository(db_session),
        SqlClientDirectory(db_session),
        LoggingNotifier(),
        clock,
    )
    sent = await send.execute(created.value.id)
    assert sent.is_ok()
    return created.value.id


async def _enable_auto_late_fee(db_session):
    repo = SqlAlchemyOverdueConfigRepository(db_session)
    config = await repo.get()
    config.auto_late_fee = True
    await repo.update(config)
    await db_session.commit()


def _sweep(db_session, clock, applier):
    sender = ReminderSender(
        SqlAlchemyReminderTemplateRepository(db_session),
        SqlAlchemyReminderLogRepository(db_session),
        SqlClientDirectory(db_session),
        LoggingNotifier(),
        clock,
        company_name="Test Co",
    )
    return ProcessOverdueInvoices(
        SqlAlchemyUnitOfWork(db_session),
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyInvoiceLineRepository(db_session),
        SqlAlchemyOverdueConfigRepository(db_session),
        SqlAlchemyReminderLogRepository(db_session),
        sender,
        applier,
        clock,
    )


@pytest.mark.asyncio
class TestOverdueSweepIntegration:

    async def test_reminder_log_survives_late_fee_failure(self, db_session, clock, client_id):
        """
        Given: Automatic late fees on and a late fee step that always fails
        When: The sweep runs on three consecutive days
        Then: The first reminder stays logged, so no reminder is repeated
        """
        # Arrange
        invoice_id = await _past_due_invoice(db_session, clock, client_id)
        await _enable_auto_late_fee(db_session)
        sweep = _sweep(db_session, clock, UnavailableLateFeeApplier(
            SqlAlchemyInvoiceRepository(db_session), SqlAlchemyInvoiceLineRepository(db_session), clock,
        ))

        # Act
        runs = []
        for day in (1, 2, 3):
            clock.advance_to(date(2025, 3, day))
            result = await sweep.execute()
            assert result.is_ok()
            runs.append((result.value.reminders_sent, result.value.failed))

        # Assert
        assert runs == [(1, 1), (0, 1), (0, 1)]

        logs = await SqlAlchemyReminderLogRepository(db_session).get_by_invoice_id(invoice_id)
        assert len(logs) == 1
        assert logs[0].sent_at.date() == date(2025, 3, 1)

        invoice = await SqlAlchemyInvoiceRepository(db_session).get_by_id(invoice_id)
        assert invoice.status == InvoiceStatus.OVERDUE

    async def test_late_fee_applied_once_per_window(self, db_session, clock, client_id):
        invoice_id = await _past_due_invoice(db_session, clock, client_id)
        await _enable_auto_late_fee(db_session)
        sweep = _sweep(db_session, clock, LateFeeApplier(
            SqlAlchemyInvoiceRepository(db_session), SqlAlchemyInvoiceLineRepository(db_session), clock,
        ))

        first = await sweep.execute()
        clock.advance_to(date(2025, 3, 2))
        second = await sweep.execute()

        assert (first.value.reminders_sent, first.value.late_fees_applied, first.value.failed) == (1, 1, 0)
        assert (second.value.reminders_sent, second.value.late_fees_applied, second.value.failed) == (0, 0, 0)

        invoice = await SqlAlchemyInvoiceRepository(db_session).get_by_id(invoice_id)
        assert Decimal(invoice.total_amount) == Decimal("1050.00")
