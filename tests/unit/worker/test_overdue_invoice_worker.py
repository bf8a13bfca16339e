"""Unit tests for OverdueInvoiceWorker

Tests cover:
- Worker initialization with configuration
- run_once sweep followed by installment reminders
- Disabled switch and error propagation
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from receivables.worker.overdue_invoices import OverdueInvoiceWorker
from receivables.app.use_cases.overdue import ProcessOverdueResultDTO
from receivables.app.use_cases.payments import InstallmentReminderResultDTO
from receivables.libs.result import Return, Error

MODULE = "receivables.worker.overdue_invoices"


@pytest.fixture
def mock_session():
    """Mock async session"""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def fixed_clock():
    clock = MagicMock()
    clock.today.return_value = date(2025, 3, 1)
    return clock


class TestOverdueInvoiceWorkerInit:

    @patch(f"{MODULE}.create_cache")
    @patch(f"{MODULE}.create_notifier")
    @patch(f"{MODULE}.ApplicationConfig")
    @patch(f"{MODULE}.create_async_engine")
    def test_initializes_with_default_config(
        self, mock_create_engine, mock_app_config, mock_create_notifier, mock_create_cache
    ):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Uses DB, cache and look-ahead settings from ApplicationConfig
        """
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_app_config.INSTALLMENT_REMINDER_DAYS_AHEAD = 5
        mock_app_config.CACHE_BACKEND = "memory"
        mock_app_config.REDIS_URL = None
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = OverdueInvoiceWorker()

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./default.db"
        assert worker.days_ahead == 5
        mock_create_cache.assert_called_once_with("memory", None)


@pytest.mark.asyncio
class TestOverdueInvoiceWorkerRunOnce:

    @patch(f"{MODULE}.create_cache")
    @patch(f"{MODULE}.create_notifier")
    @patch(f"{MODULE}.ApplicationConfig")
    @patch(f"{MODULE}.SendInstallmentReminders")
    @patch(f"{MODULE}.ProcessOverdueInvoices")
    @patch(f"{MODULE}.create_async_engine")
    @patch(f"{MODULE}.sessionmaker")
    async def test_run_once_sweeps_then_reminds_installments(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_process_class,
        mock_reminders_class,
        mock_app_config,
        mock_create_notifier,
        mock_create_cache,
        mock_session,
        fixed_clock,
    ):
        """
        Given: Overdue processing enabled
        When: run_once is called
        Then: The sweep runs with the worker cache, then installment reminders
        """
        # Arrange
        mock_app_config.OVERDUE_ENABLED = True
        mock_app_config.INSTALLMENT_REMINDER_DAYS_AHEAD = 7
        mock_app_config.COMPANY_NAME = "Test Co"
        mock_create_engine.return_value = MagicMock()
        mock_sessionmaker.return_value = MagicMock(return_value=mock_session)

        sweep_result = ProcessOverdueResultDTO(
            run_date=date(2025, 3, 1), checked=3, marked_overdue=1, reminders_sent=2, late_fees_applied=1,
        )
        mock_process = MagicMock()
        mock_process.execute = AsyncMock(return_value=Return.ok(sweep_result))
        mock_process_class.return_value = mock_process

        mock_reminders = MagicMock()
        mock_reminders.execute = AsyncMock(
            return_value=Return.ok(InstallmentReminderResultDTO(checked=1, reminders_sent=1, failed=0, installment_ids=[4]))
        )
        mock_reminders_class.return_value = mock_reminders

        worker = OverdueInvoiceWorker(clock=fixed_clock)

        # Act
        result = await worker.run_once()

        # Assert
        assert result.checked == 3
        assert result.reminders_sent == 2
        assert mock_process_class.call_args.kwargs["cache"] is mock_create_cache.return_value
        assert mock_process_class.call_args.kwargs["clock"] is fixed_clock
        mock_reminders.execute.assert_called_once_with(days_ahead=7)

    @patch(f"{MODULE}.create_cache")
    @patch(f"{MODULE}.create_notifier")
    @patch(f"{MODULE}.ApplicationConfig")
    @patch(f"{MODULE}.ProcessOverdueInvoices")
    @patch(f"{MODULE}.create_async_engine")
    @patch(f"{MODULE}.sessionmaker")
    async def test_run_once_skips_when_disabled(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_process_class,
        mock_app_config,
        mock_create_notifier,
        mock_create_cache,
        fixed_clock,
    ):
        mock_app_config.OVERDUE_ENABLED = False
        mock_create_engine.return_value = MagicMock()

        worker = OverdueInvoiceWorker(clock=fixed_clock)
        result = await worker.run_once()

        assert result.run_date == date(2025, 3, 1)
        assert result.checked == 0
        mock_process_class.assert_not_called()

    @patch(f"{MODULE}.create_cache")
    @patch(f"{MODULE}.create_notifier")
    @patch(f"{MODULE}.ApplicationConfig")
    @patch(f"{MODULE}.SendInstallmentReminders")
    @patch(f"{MODULE}.ProcessOverdueInvoices")
    @patch(f"{MODULE}.create_async_engine")
    @patch(f"{MODULE}.sessionmaker")
    async def test_run_once_raises_on_sweep_error(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_process_class,
        mock_reminders_class,
        mock_app_config,
        mock_create_notifier,
        mock_create_cache,
        mock_session,
        fixed_clock,
    ):
        mock_app_config.OVERDUE_ENABLED = True
        mock_create_engine.return_value = MagicMock()
        mock_sessionmaker.return_value = MagicMock(return_value=mock_session)

        mock_process = MagicMock()
        mock_process.execute = AsyncMock(
            return_value=Return.err(Error(code="PROCESS_OVERDUE_FAILED", message="Failed to load overdue invoices"))
        )
        mock_process_class.return_value = mock_process

        worker = OverdueInvoiceWorker(clock=fixed_clock)

        with pytest.raises(RuntimeError, match="Failed to load overdue invoices"):
            await worker.run_once()
        mock_reminders_class.assert_not_called()

    @patch(f"{MODULE}.create_cache")
    @patch(f"{MODULE}.create_notifier")
    @patch(f"{MODULE}.ApplicationConfig")
    @patch(f"{MODULE}.SendInstallmentReminders")
    @patch(f"{MODULE}.create_async_engine")
    @patch(f"{MODULE}.sessionmaker")
    async def test_installment_reminder_failure_is_logged_only(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_reminders_class,
        mock_app_config,
        mock_create_notifier,
        mock_create_cache,
        mock_session,
        fixed_clock,
    ):
        mock_create_engine.return_value = MagicMock()
        mock_sessionmaker.return_value = MagicMock(return_value=mock_session)
        mock_reminders = MagicMock()
        mock_reminders.execute = AsyncMock(
            return_value=Return.err(Error(code="INSTALLMENT_REMINDERS_FAILED", message="Failed"))
        )
        mock_reminders_class.return_value = mock_reminders

        worker = OverdueInvoiceWorker(clock=fixed_clock)

        assert await worker.run_installment_reminders() is None
