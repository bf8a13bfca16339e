import pytest
from datetime import date, datetime, time
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from receivables.app.services.clock import Clock
from receivables.domain.invoice import Invoice, InvoiceStatus


class FixedClock(Clock):
    """Clock pinned to one instant"""

    def __init__(self, today: date):
        self.current = datetime.combine(today, time(9, 0))

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    """Clock fixed at 2025-03-01 09:00"""
    return FixedClock(date(2025, 3, 1))


@pytest.fixture
def make_invoice():
    """Factory for invoices with sensible defaults"""

    def _make(**overrides) -> Invoice:
        values = dict(
            id=1,
            client_id=7,
            invoice_number="INV-202502-0001",
            title="February services",
            status=InvoiceStatus.SENT,
            currency="USD",
            subtotal=Decimal("1000.00"),
            tax_total=Decimal("0.00"),
            total_amount=Decimal("1000.00"),
            amount_paid=Decimal("0.00"),
            due_date=date(2025, 3, 15),
            sent_at=datetime(2025, 2, 15, 10, 0),
            created_at=datetime(2025, 2, 15, 10, 0),
            updated_at=datetime(2025, 2, 15, 10, 0),
        )
        values.update(overrides)
        return Invoice(**values)

    return _make
