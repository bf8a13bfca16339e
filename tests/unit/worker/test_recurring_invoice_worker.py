"""Unit tests for RecurringInvoiceWorker

Tests cover:
- Worker initialization with configuration
- run_once wiring and disabled switch
- Error propagation
- Shutdown and cleanup
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from receivables.worker.recurring_invoices import RecurringInvoiceWorker
from receivables.app.use_cases.recurring import ProcessDueResultDTO
from receivables.app.use_cases.recurring.dtos import TemplateRunDTO
from receivables.libs.result import Return, Error


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


@pytest.fixture
def sample_result():
    return ProcessDueResultDTO(
        run_date=date(2025, 3, 1),
        processed=2,
        succeeded=1,
        failed=1,
        results=[
            TemplateRunDTO(template_id=1, success=True, invoice_id=40, invoice_number="INV-202503-0001"),
            TemplateRunDTO(template_id=2, success=False, error="client not found"),
        ],
    )


class TestRecurringInvoiceWorkerInit:
    """Test worker initialization"""

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    def test_initializes_with_default_config(self, mock_create_engine, mock_app_config, mock_create_notifier):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Uses defaults from ApplicationConfig
        """
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_app_config.NOTIFIER_WEBHOOK_URL = None
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = RecurringInvoiceWorker()

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./default.db"
        mock_create_engine.assert_called_once()
        mock_create_notifier.assert_called_once_with(None)

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    def test_initializes_with_custom_values(self, mock_create_engine, mock_app_config, mock_create_notifier, fixed_clock):
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_create_engine.return_value = MagicMock()

        worker = RecurringInvoiceWorker(
            db_uri="postgresql+asyncpg://custom@localhost/custom_db",
            webhook_url="http://hooks.test/notify",
            clock=fixed_clock,
        )

        assert worker.db_uri == "postgresql+asyncpg://custom@localhost/custom_db"
        assert worker.clock is fixed_clock
        mock_create_notifier.assert_called_once_with("http://hooks.test/notify")


@pytest.mark.asyncio
class TestRecurringInvoiceWorkerRunOnce:
    """Test run_once execution"""

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.ProcessDueRecurringInvoices")
    @patch("receivables.worker.recurring_invoices.GenerateRecurringInvoice")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    @patch("receivables.worker.recurring_invoices.sessionmaker")
    async def test_run_once_processes_due_templates(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_generate_class,
        mock_process_class,
        mock_app_config,
        mock_create_notifier,
        mock_session,
        fixed_clock,
        sample_result,
    ):
        """
        Given: Recurring generation enabled
        When: run_once is called
        Then: ProcessDueRecurringInvoices runs with a generator bound to the session
        """
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./test.db"
        mock_app_config.RECURRING_ENABLED = True
        mock_app_config.INVOICE_NUMBER_PREFIX = "INV"
        mock_app_config.COMPANY_NAME = "Test Co"
        mock_create_engine.return_value = MagicMock()
        mock_sessionmaker.return_value = MagicMock(return_value=mock_session)

        mock_process = MagicMock()
        mock_process.execute = AsyncMock(return_value=Return.ok(sample_result))
        mock_process_class.return_value = mock_process

        worker = RecurringInvoiceWorker(clock=fixed_clock)

        # Act
        result = await worker.run_once()

        # Assert
        assert result.processed == 2
        assert result.succeeded == 1
        assert result.failed == 1

        generate_kwargs = mock_generate_class.call_args.kwargs
        assert generate_kwargs["clock"] is fixed_clock
        assert generate_kwargs["invoice_number_prefix"] == "INV"
        assert generate_kwargs["company_name"] == "Test Co"
        process_kwargs = mock_process_class.call_args.kwargs
        assert process_kwargs["generate_invoice"] is mock_generate_class.return_value
        mock_process.execute.assert_called_once()

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.ProcessDueRecurringInvoices")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    @patch("receivables.worker.recurring_invoices.sessionmaker")
    async def test_run_once_skips_when_disabled(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_process_class,
        mock_app_config,
        mock_create_notifier,
        fixed_clock,
    ):
        mock_app_config.RECURRING_ENABLED = False
        mock_create_engine.return_value = MagicMock()

        worker = RecurringInvoiceWorker(clock=fixed_clock)
        result = await worker.run_once()

        assert result.run_date == date(2025, 3, 1)
        assert result.processed == 0
        mock_process_class.assert_not_called()

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.ProcessDueRecurringInvoices")
    @patch("receivables.worker.recurring_invoices.GenerateRecurringInvoice")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    @patch("receivables.worker.recurring_invoices.sessionmaker")
    async def test_run_once_raises_on_error_result(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_generate_class,
        mock_process_class,
        mock_app_config,
        mock_create_notifier,
        mock_session,
        fixed_clock,
    ):
        """
        Given: The due templates cannot be loaded
        When: run_once is called
        Then: RuntimeError carries the error message
        """
        mock_app_config.RECURRING_ENABLED = True
        mock_create_engine.return_value = MagicMock()
        mock_sessionmaker.return_value = MagicMock(return_value=mock_session)

        mock_process = MagicMock()
        mock_process.execute = AsyncMock(
            return_value=Return.err(
                Error(code="PROCESS_RECURRING_FAILED", message="Failed to load due recurring templates")
            )
        )
        mock_process_class.return_value = mock_process

        worker = RecurringInvoiceWorker(clock=fixed_clock)

        with pytest.raises(RuntimeError, match="Failed to load due recurring templates"):
            await worker.run_once()


@pytest.mark.asyncio
class TestRecurringInvoiceWorkerShutdown:

    @patch("receivables.worker.recurring_invoices.create_notifier")
    @patch("receivables.worker.recurring_invoices.ApplicationConfig")
    @patch("receivables.worker.recurring_invoices.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine, mock_app_config, mock_create_notifier):
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine

        worker = RecurringInvoiceWorker()
        await worker.shutdown()

        mock_engine.dispose.assert_called_once()
