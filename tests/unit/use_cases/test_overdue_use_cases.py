"""Unit tests for overdue escalation use cases

Tests cover:
- The daily sweep: overdue marking, reminders, late fees
- Per-invoice failure isolation
- Manual reminders and late fees
- Overdue configuration validation
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from receivables.app.services.client_directory import ClientInfo
from receivables.app.services.notifier import EmailResult
from receivables.app.use_cases.overdue import (
    ReminderSender,
    LateFeeApplier,
    ProcessOverdueInvoices,
    SendReminder,
    ApplyLateFee,
    UpdateOverdueConfig,
    SendReminderCommandDTO,
    ApplyLateFeeCommandDTO,
    UpdateOverdueConfigCommandDTO,
    STATISTICS_CACHE_KEY,
)
from receivables.domain.invoice import InvoiceStatus
from receivables.domain.invoice_line import InvoiceLine, LineItemKind
from receivables.domain.overdue import OverdueConfig, ReminderLog, ReminderTemplate, ReminderTier


async def _assign_log_id(log: ReminderLog) -> ReminderLog:
    log.id = 77
    return log


async def _assign_line_id(line: InvoiceLine) -> InvoiceLine:
    line.id = 88
    return line


@pytest.fixture
def overdue_config():
    return OverdueConfig(id=1, auto_late_fee=True)


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda invoice: invoice)
    return repo


@pytest.fixture
def mock_line_repo():
    repo = MagicMock()
    repo.get_latest_by_kind = AsyncMock(return_value=None)
    repo.get_by_invoice_id = AsyncMock(return_value=[
        InvoiceLine(
            id=1, invoice_id=1, description="Services", quantity=Decimal("1"),
            unit_price=Decimal("1000.00"), amount=Decimal("1000.00"),
        ),
    ])
    repo.create = AsyncMock(side_effect=_assign_line_id)
    return repo


@pytest.fixture
def mock_config_repo(overdue_config):
    repo = MagicMock()
    repo.get = AsyncMock(return_value=overdue_config)
    return repo


@pytest.fixture
def mock_log_repo():
    repo = MagicMock()
    repo.get_by_invoice_id = AsyncMock(return_value=[])
    repo.create = AsyncMock(side_effect=_assign_log_id)
    return repo


@pytest.fixture
def mock_template_repo():
    repo = MagicMock()
    repo.get_default_for_tier = AsyncMock(
        return_value=ReminderTemplate(
            id=1,
            name="Gentle Reminder",
            subject="Reminder: Invoice #{invoice_number}",
            body="Dear {client_name}, invoice #{invoice_number} is {days_overdue} days overdue.",
            tier=ReminderTier.GENTLE,
            is_default=True,
        )
    )
    return repo


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send_email = AsyncMock(return_value=EmailResult(success=True, message_id="msg-1"))
    notifier.create_notification = AsyncMock()
    return notifier


@pytest.fixture
def sender(mock_template_repo, mock_log_repo, mock_notifier, clock):
    directory = MagicMock()
    directory.find_by_id = AsyncMock(
        return_value=ClientInfo(id=7, name="Acme Corp", email="billing@acme.test")
    )
    return ReminderSender(mock_template_repo, mock_log_repo, directory, mock_notifier, clock, company_name="Test Co")


@pytest.fixture
def applier(mock_invoice_repo, mock_line_repo, clock):
    return LateFeeApplier(mock_invoice_repo, mock_line_repo, clock)


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.delete = AsyncMock()
    return cache


@pytest.fixture
def sweep(
    mock_uow, mock_invoice_repo, mock_line_repo, mock_config_repo, mock_log_repo, sender, applier, clock, mock_cache
):
    return ProcessOverdueInvoices(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        line_repo=mock_line_repo,
        config_repo=mock_config_repo,
        log_repo=mock_log_repo,
        sender=sender,
        applier=applier,
        clock=clock,
        cache=mock_cache,
    )


@pytest.mark.asyncio
class TestProcessOverdueInvoices:

    async def test_sweep_escalates_past_due_invoice(
        self, sweep, mock_invoice_repo, mock_log_repo, mock_notifier, mock_cache, make_invoice
    ):
        """
        Given: A sent 1000.00 invoice five days past due, grace of 3 days
        When: The sweep runs
        Then: It turns overdue, gets a gentle reminder and a 5% late fee
        """
        # Arrange
        invoice = make_invoice(due_date=date(2025, 2, 24))
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[invoice])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)

        # Act
        result = await sweep.execute()

        # Assert
        assert result.is_ok()
        summary = result.value
        assert summary.checked == 1
        assert summary.marked_overdue == 1
        assert summary.reminders_sent == 1
        assert summary.late_fees_applied == 1
        assert summary.failed == 0

        assert invoice.status == InvoiceStatus.OVERDUE
        assert invoice.total_amount == Decimal("1050.00")
        assert invoice.amount_paid == Decimal("0.00")

        log = mock_log_repo.create.call_args.args[0]
        assert log.tier == ReminderTier.GENTLE
        assert log.success is True
        message = mock_notifier.send_email.call_args.args[0]
        assert message.subject == "Reminder: Invoice #INV-202502-0001"
        assert "5 days overdue" in message.body
        mock_notifier.create_notification.assert_called_once()
        mock_cache.delete.assert_called_once_with(STATISTICS_CACHE_KEY)

    async def test_partial_invoice_stays_partial(self, sweep, mock_invoice_repo, mock_config_repo, overdue_config, make_invoice):
        overdue_config.auto_late_fee = False
        invoice = make_invoice(
            status=InvoiceStatus.PARTIAL, amount_paid=Decimal("400.00"), due_date=date(2025, 2, 24)
        )
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[invoice])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)

        result = await sweep.execute()

        assert result.is_ok()
        assert result.value.marked_overdue == 0
        assert result.value.reminders_sent == 1
        assert result.value.late_fees_applied == 0
        assert invoice.status == InvoiceStatus.PARTIAL

    async def test_recent_reminder_and_fee_not_repeated(
        self, sweep, mock_invoice_repo, mock_log_repo, mock_line_repo, mock_notifier, make_invoice
    ):
        """
        Given: A reminder sent yesterday and a late fee applied yesterday
        When: The sweep runs again
        Then: Nothing new is sent or charged
        """
        invoice = make_invoice(status=InvoiceStatus.OVERDUE, due_date=date(2025, 2, 20), total_amount=Decimal("1050.00"))
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[invoice])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_log_repo.get_by_invoice_id = AsyncMock(return_value=[
            ReminderLog(id=1, invoice_id=1, tier=ReminderTier.GENTLE, sent_at=datetime(2025, 2, 28, 9, 0)),
        ])
        mock_line_repo.get_latest_by_kind = AsyncMock(return_value=InvoiceLine(
            id=2, invoice_id=1, description="Late Payment Fee", quantity=Decimal("1"),
            unit_price=Decimal("50.00"), amount=Decimal("50.00"), kind=LineItemKind.LATE_FEE,
            created_at=datetime(2025, 2, 28, 9, 0),
        ))

        result = await sweep.execute()

        assert result.is_ok()
        assert result.value.reminders_sent == 0
        assert result.value.late_fees_applied == 0
        assert invoice.total_amount == Decimal("1050.00")
        mock_notifier.send_email.assert_not_called()
        mock_line_repo.create.assert_not_called()

    async def test_one_failure_does_not_stop_sweep(self, sweep, mock_invoice_repo, mock_uow, overdue_config, make_invoice):
        overdue_config.auto_late_fee = False
        first = make_invoice(id=1, due_date=date(2025, 2, 24))
        second = make_invoice(id=2, invoice_number="INV-202502-0002", due_date=date(2025, 2, 24))
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[first, second])
        mock_invoice_repo.get_by_id = AsyncMock(side_effect=[Exception("row lock timeout"), second, second])

        result = await sweep.execute()

        assert result.is_ok()
        summary = result.value
        assert summary.checked == 2
        assert summary.failed == 1
        assert summary.errors[0].invoice_id == 1
        assert summary.errors[0].error == "row lock timeout"
        assert summary.reminders_sent == 1
        assert second.status == InvoiceStatus.OVERDUE
        mock_uow.rollback.assert_called()

    async def test_fee_failure_keeps_committed_reminder(
        self, sweep, mock_invoice_repo, mock_log_repo, mock_uow, make_invoice
    ):
        """
        Given: A past-due invoice whose late fee step fails
        When: The sweep runs
        Then: The reminder log was committed before the fee step and is not rolled back
        """
        # Arrange
        invoice = make_invoice(due_date=date(2025, 2, 24))
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[invoice])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        sweep.applier = MagicMock()
        sweep.applier.apply = AsyncMock(side_effect=Exception("line insert failed"))

        # Act
        result = await sweep.execute()

        # Assert
        assert result.is_ok()
        summary = result.value
        assert summary.reminders_sent == 1
        assert summary.late_fees_applied == 0
        assert summary.failed == 1
        assert summary.errors[0].error == "line insert failed"
        mock_log_repo.create.assert_called_once()
        # candidates, status step, reminder step, then the failed fee
        assert [c[0] for c in mock_uow.mock_calls] == ["commit", "commit", "commit", "rollback"]

    async def test_zero_fee_is_skipped(self, sweep, mock_invoice_repo, mock_line_repo, overdue_config, make_invoice):
        overdue_config.late_fee_amount = Decimal("0.00")
        invoice = make_invoice(due_date=date(2025, 2, 24))
        mock_invoice_repo.list_past_due = AsyncMock(return_value=[invoice])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)

        result = await sweep.execute()

        assert result.is_ok()
        assert result.value.reminders_sent == 1
        assert result.value.late_fees_applied == 0
        assert result.value.failed == 0
        assert invoice.total_amount == Decimal("1000.00")
        mock_line_repo.create.assert_not_called()

    async def test_candidate_load_failure(self, sweep, mock_invoice_repo):
        mock_invoice_repo.list_past_due = AsyncMock(side_effect=Exception("connection reset"))

        result = await sweep.execute()

        assert result.is_err()
        assert result.error.code == "PROCESS_OVERDUE_FAILED"


@pytest.mark.asyncio
class TestSendReminder:

    @pytest.fixture
    def use_case(self, mock_uow, mock_invoice_repo, mock_config_repo, mock_template_repo, mock_log_repo, sender):
        return SendReminder(mock_uow, mock_invoice_repo, mock_config_repo, mock_template_repo, mock_log_repo, sender)

    async def test_next_tier_after_last_reminder(self, use_case, mock_invoice_repo, mock_log_repo, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(
            return_value=make_invoice(status=InvoiceStatus.OVERDUE, due_date=date(2025, 2, 1))
        )
        mock_log_repo.get_by_invoice_id = AsyncMock(return_value=[
            ReminderLog(id=1, invoice_id=1, tier=ReminderTier.GENTLE, sent_at=datetime(2025, 2, 10, 9, 0)),
        ])

        result = await use_case.execute(1, SendReminderCommandDTO())

        assert result.is_ok()
        assert result.value.tier == "firm"
        assert result.value.success is True
        assert result.value.log_id == 77

    async def test_missing_template_is_logged_as_failure(
        self, use_case, mock_invoice_repo, mock_template_repo, mock_log_repo, mock_uow, make_invoice
    ):
        """
        Given: No default template for the requested tier
        When: A reminder is sent
        Then: The attempt is logged with success=False and committed
        """
        mock_invoice_repo.get_by_id = AsyncMock(
            return_value=make_invoice(status=InvoiceStatus.OVERDUE, due_date=date(2025, 2, 1))
        )
        mock_template_repo.get_default_for_tier = AsyncMock(return_value=None)

        result = await use_case.execute(1, SendReminderCommandDTO(tier="URGENT"))

        assert result.is_ok()
        assert result.value.tier == "urgent"
        assert result.value.success is False
        assert result.value.error_message == "No reminder template for tier urgent"
        mock_log_repo.create.assert_called_once()
        mock_uow.commit.assert_called_once()

    async def test_unknown_tier(self, use_case, mock_invoice_repo, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(status=InvoiceStatus.OVERDUE))

        result = await use_case.execute(1, SendReminderCommandDTO(tier="final"))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"

    async def test_paid_invoice_rejected(self, use_case, mock_invoice_repo, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(
            return_value=make_invoice(status=InvoiceStatus.PAID, amount_paid=Decimal("1000.00"))
        )

        result = await use_case.execute(1, SendReminderCommandDTO())

        assert result.is_err()
        assert result.error.code == "INVALID_OPERATION"


@pytest.mark.asyncio
class TestApplyLateFee:

    async def test_fixed_override(self, mock_uow, mock_invoice_repo, mock_config_repo, applier, mock_line_repo, make_invoice):
        """
        Given: A sent 1000.00 invoice with 400.00 paid
        When: A fixed late fee of 25 is applied
        Then: Total grows by 25.00, amount_paid is untouched
        """
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(amount_paid=Decimal("400.00")))

        result = await ApplyLateFee(mock_uow, mock_invoice_repo, mock_config_repo, applier).execute(
            1, ApplyLateFeeCommandDTO(amount="25", type="FIXED")
        )

        assert result.is_ok()
        fee = result.value
        assert fee.fee_amount == Decimal("25.00")
        assert fee.fee_type == "fixed"
        assert fee.line_id == 88
        assert fee.total_amount == Decimal("1025.00")
        assert fee.amount_paid == Decimal("400.00")
        assert fee.remaining_balance == Decimal("625.00")
        assert fee.status == "partial"

        line = mock_line_repo.create.call_args.args[0]
        assert line.kind == LineItemKind.LATE_FEE
        assert line.description == "Late Payment Fee"
        assert line.position == 1
        mock_uow.commit.assert_called_once()

    async def test_configured_percentage(self, mock_uow, mock_invoice_repo, mock_config_repo, applier, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())

        result = await ApplyLateFee(mock_uow, mock_invoice_repo, mock_config_repo, applier).execute(
            1, ApplyLateFeeCommandDTO()
        )

        assert result.is_ok()
        assert result.value.fee_amount == Decimal("50.00")
        assert result.value.fee_type == "percentage"

    @pytest.mark.parametrize("status", [InvoiceStatus.PAID, InvoiceStatus.CANCELED, InvoiceStatus.DRAFT])
    async def test_closed_invoice_rejected(
        self, mock_uow, mock_invoice_repo, mock_config_repo, applier, mock_line_repo, make_invoice, status
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(status=status))

        result = await ApplyLateFee(mock_uow, mock_invoice_repo, mock_config_repo, applier).execute(
            1, ApplyLateFeeCommandDTO()
        )

        assert result.is_err()
        assert result.error.code == "INVALID_OPERATION"
        mock_line_repo.create.assert_not_called()
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestUpdateOverdueConfig:

    async def test_auto_late_fee_needs_positive_amount(self, mock_uow, mock_config_repo, overdue_config):
        """
        Given: Automatic late fees switched on
        When: The fee amount is set to zero
        Then: VALIDATION_ERROR and the stored configuration is unchanged
        """
        mock_config_repo.update = AsyncMock(side_effect=lambda config: config)

        result = await UpdateOverdueConfig(mock_uow, mock_config_repo).execute(
            UpdateOverdueConfigCommandDTO(auto_late_fee=True, late_fee_amount="0")
        )

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert "late_fee_amount must be greater than 0 when auto_late_fee is enabled" in result.error.details
        assert overdue_config.late_fee_amount == Decimal("5.00")
        mock_config_repo.update.assert_not_called()

    async def test_zero_amount_allowed_without_auto_fee(self, mock_uow, mock_config_repo, overdue_config):
        overdue_config.auto_late_fee = False
        mock_config_repo.update = AsyncMock(side_effect=lambda config: config)

        result = await UpdateOverdueConfig(mock_uow, mock_config_repo).execute(
            UpdateOverdueConfigCommandDTO(late_fee_amount="0")
        )

        assert result.is_ok()
        assert result.value.late_fee_amount == Decimal("0.00")
