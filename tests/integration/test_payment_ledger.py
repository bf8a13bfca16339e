"""Integration tests for payments against a real database

Covers the partial -> paid flow, overpayment rejection and the balance
reversal on payment delete.
"""

import pytest
from datetime import date
from decimal import Decimal

from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from receivables.adapter.repositories.payment_method_repository import SqlAlchemyPaymentMethodRepository
from receivables.adapter.repositories.payment_plan_repository import SqlAlchemyPaymentPlanRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.notifier import LoggingNotifier
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.use_cases.invoices import CreateInvoice, CreateInvoiceCommandDTO, LineItemDTO
from receivables.app.use_cases.payments import (
    PaymentLedger,
    PaymentReceipts,
    RecordPayment,
    DeletePayment,
    RecordPaymentCommandDTO,
)


async def _create_invoice(db_session, clock, client_id, due_date=date(2025, 3, 15)):
    use_case = CreateInvoice(
        SqlAlchemyUnitOfWork(db_session),
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyInvoiceLineRepository(db_session),
        SqlClientDirectory(db_session),
        clock,
    )
    result = await use_case.execute(
        CreateInvoiceCommandDTO(
            client_id=client_id,
            due_date=due_date,
            title="March services",
            items=[LineItemDTO(description="Consulting hours", quantity="10", unit_price="100.00")],
        )
    )
    assert result.is_ok()
    return result.value.id


async def _method_id(db_session, name):
    methods = await SqlAlchemyPaymentMethodRepository(db_session).list(active_only=True)
    return next(method.id for method in methods if method.name == name)


def _ledger(db_session, clock):
    return PaymentLedger(
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyPaymentRepository(db_session),
        SqlAlchemyPaymentMethodRepository(db_session),
        clock,
    )


def _record_payment(db_session, clock):
    receipts = PaymentReceipts(LoggingNotifier(), SqlClientDirectory(db_session), "Test Co")
    return RecordPayment(SqlAlchemyUnitOfWork(db_session), _ledger(db_session, clock), receipts)


@pytest.mark.asyncio
class TestPaymentLedgerIntegration:

    async def test_partial_then_full_payment(self, db_session, clock, client_id):
        """
        Given: A 1000.00 invoice
        When: 400.00 and then 600.00 are recorded
        Then: The invoice goes partial, then paid with paid_at set
        """
        # Arrange
        invoice_id = await _create_invoice(db_session, clock, client_id)
        card_id = await _method_id(db_session, "Credit Card")
        use_case = _record_payment(db_session, clock)

        # Act
        first = await use_case.execute(invoice_id, RecordPaymentCommandDTO(amount="400.00", payment_method_id=card_id))
        second = await use_case.execute(invoice_id, RecordPaymentCommandDTO(amount="600.00", payment_method_id=card_id))

        # Assert
        assert first.is_ok()
        assert first.value.invoice.status == "partial"
        assert first.value.invoice.remaining_balance == Decimal("600.00")

        assert second.is_ok()
        assert second.value.invoice.status == "paid"
        assert second.value.invoice.amount_paid == Decimal("1000.00")
        assert second.value.invoice.remaining_balance == Decimal("0.00")
        assert second.value.invoice.paid_at is not None

        payments = await SqlAlchemyPaymentRepository(db_session).get_by_invoice_id(invoice_id)
        assert sum(Decimal(p.amount) for p in payments) == Decimal("1000.00")

    async def test_overpayment_is_rejected_and_balance_unchanged(self, db_session, clock, client_id):
        invoice_id = await _create_invoice(db_session, clock, client_id)
        card_id = await _method_id(db_session, "Credit Card")
        use_case = _record_payment(db_session, clock)

        await use_case.execute(invoice_id, RecordPaymentCommandDTO(amount="400.00", payment_method_id=card_id))
        result = await use_case.execute(invoice_id, RecordPaymentCommandDTO(amount="600.01", payment_method_id=card_id))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"

        invoice = await SqlAlchemyInvoiceRepository(db_session).get_by_id(invoice_id)
        assert Decimal(invoice.amount_paid) == Decimal("400.00")
        payments = await SqlAlchemyPaymentRepository(db_session).get_by_invoice_id(invoice_id)
        assert len(payments) == 1

    async def test_payment_needing_confirmation_is_unconfirmed(self, db_session, clock, client_id):
        invoice_id = await _create_invoice(db_session, clock, client_id)
        transfer_id = await _method_id(db_session, "Bank Transfer")

        result = await _record_payment(db_session, clock).execute(
            invoice_id, RecordPaymentCommandDTO(amount="250.00", payment_method_id=transfer_id)
        )

        assert result.is_ok()
        assert result.value.payment.is_confirmed is False
        assert result.value.payment.payment_method_name == "Bank Transfer"
        # Unconfirmed payments still count toward the balance
        assert result.value.invoice.amount_paid == Decimal("250.00")

    async def test_delete_payment_restores_balance(self, db_session, clock, client_id):
        """
        Given: A paid invoice settled by two payments
        When: The 600.00 payment is deleted
        Then: amount_paid drops back to 400.00 and the invoice is partial again
        """
        # Arrange
        invoice_id = await _create_invoice(db_session, clock, client_id)
        card_id = await _method_id(db_session, "Credit Card")
        record = _record_payment(db_session, clock)
        await record.execute(invoice_id, RecordPaymentCommandDTO(amount="400.00", payment_method_id=card_id))
        paid = await record.execute(invoice_id, RecordPaymentCommandDTO(amount="600.00", payment_method_id=card_id))
        payment_id = paid.value.payment.id

        use_case = DeletePayment(
            SqlAlchemyUnitOfWork(db_session),
            _ledger(db_session, clock),
            SqlAlchemyPaymentRepository(db_session),
            SqlAlchemyPaymentPlanRepository(db_session),
        )

        # Act
        result = await use_case.execute(payment_id)

        # Assert
        assert result.is_ok()
        assert result.value.invoice.status == "partial"
        assert result.value.invoice.amount_paid == Decimal("400.00")
        assert result.value.invoice.paid_at is None

        payments = await SqlAlchemyPaymentRepository(db_session).get_by_invoice_id(invoice_id)
        assert [Decimal(p.amount) for p in payments] == [Decimal("400.00")]
