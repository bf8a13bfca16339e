"""Unit tests for payment use cases

Tests cover:
- RecordPayment balance math, status and overpayment
- Confirmation-gated receipts
- DeletePayment reversal and installment unlinking
- Installment plans
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from receivables.app.services.client_directory import ClientInfo
from receivables.app.services.notifier import EmailResult
from receivables.app.use_cases.payments import (
    PaymentLedger,
    PaymentReceipts,
    RecordPayment,
    DeletePayment,
    CreatePaymentPlan,
    RecordInstallmentPayment,
    RecordPaymentCommandDTO,
    CreatePaymentPlanCommandDTO,
    InstallmentInputDTO,
)
from receivables.domain.invoice import InvoiceStatus
from receivables.domain.payment import Payment
from receivables.domain.payment_method import PaymentMethod
from receivables.domain.payment_plan import (
    Installment,
    InstallmentStatus,
    PaymentPlan,
    PaymentPlanStatus,
)


def _method(method_id: int = 1, name: str = "Credit Card", requires_confirmation: bool = False, is_active: bool = True):
    return PaymentMethod(
        id=method_id,
        name=name,
        requires_confirmation=requires_confirmation,
        is_active=is_active,
    )


async def _assign_payment_id(payment: Payment) -> Payment:
    payment.id = 501
    return payment


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda invoice: invoice)
    return repo


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=_assign_payment_id)
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def mock_method_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=_method())
    return repo


@pytest.fixture
def mock_plan_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda plan: plan)
    repo.update_installment = AsyncMock(side_effect=lambda installment: installment)
    return repo


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.create_notification = AsyncMock()
    notifier.send_email = AsyncMock(return_value=EmailResult(success=True, message_id="msg-1"))
    return notifier


@pytest.fixture
def receipts(mock_notifier):
    directory = MagicMock()
    directory.find_by_id = AsyncMock(
        return_value=ClientInfo(id=7, name="Acme Corp", email="billing@acme.test")
    )
    return PaymentReceipts(mock_notifier, directory, company_name="Test Co")


@pytest.fixture
def ledger(mock_invoice_repo, mock_payment_repo, mock_method_repo, clock):
    return PaymentLedger(mock_invoice_repo, mock_payment_repo, mock_method_repo, clock)


@pytest.fixture
def record_payment(mock_uow, ledger, receipts):
    return RecordPayment(uow=mock_uow, ledger=ledger, receipts=receipts)


@pytest.mark.asyncio
class TestRecordPayment:

    async def test_partial_then_full_payment(self, record_payment, mock_invoice_repo, mock_uow, make_invoice, clock):
        """
        Given: A sent invoice for 1000.00
        When: 400.00 and then 600.00 are recorded
        Then: Status goes partial then paid and the balance reaches zero
        """
        # Arrange
        invoice = make_invoice()
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)

        # Act
        first = await record_payment.execute(1, RecordPaymentCommandDTO(amount="400.00", payment_method_id=1))
        second = await record_payment.execute(1, RecordPaymentCommandDTO(amount="600.00", payment_method_id=1))

        # Assert
        assert first.is_ok()
        assert first.value.invoice.status == "partial"
        assert first.value.invoice.remaining_balance == Decimal("600.00")
        assert first.value.payment.amount == Decimal("400.00")
        assert first.value.payment.payment_date == date(2025, 3, 1)

        assert second.is_ok()
        assert second.value.invoice.status == "paid"
        assert second.value.invoice.amount_paid == Decimal("1000.00")
        assert second.value.invoice.remaining_balance == Decimal("0.00")
        assert second.value.invoice.paid_at == clock.now()

        mock_invoice_repo.get_by_id.assert_called_with(1, for_update=True)
        assert mock_uow.commit.call_count == 2

    async def test_overpayment_rejected(self, record_payment, mock_invoice_repo, mock_payment_repo, mock_uow, make_invoice):
        """
        Given: An invoice with 600.00 remaining
        When: A payment of 600.01 is recorded
        Then: VALIDATION_ERROR and nothing is written
        """
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(amount_paid=Decimal("400.00")))

        # Act
        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="600.01", payment_method_id=1))

        # Assert
        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert "600.00" in result.error.reason
        mock_payment_repo.create.assert_not_called()
        mock_uow.rollback.assert_called_once()

    @pytest.mark.parametrize("status", [InvoiceStatus.DRAFT, InvoiceStatus.CANCELED, InvoiceStatus.PAID])
    async def test_invoice_not_payable(self, record_payment, mock_invoice_repo, make_invoice, status):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(status=status))

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="10.00", payment_method_id=1))

        assert result.is_err()
        assert result.error.code == "INVALID_OPERATION"

    @pytest.mark.parametrize("amount,message", [
        ("0", "amount must be greater than 0"),
        ("-5", "amount must be greater than 0"),
        ("12.345", "amount cannot have more than 2 decimal places"),
        ("ten", "amount must be a number"),
        (None, "amount is required"),
    ])
    async def test_invalid_amount(self, record_payment, mock_invoice_repo, make_invoice, amount, message):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount=amount, payment_method_id=1))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert message in result.error.details

    async def test_inactive_method(self, record_payment, mock_invoice_repo, mock_method_repo, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_method_repo.get_by_id = AsyncMock(return_value=_method(name="Check", is_active=False))

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="10.00", payment_method_id=1))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert "payment_method_id: payment method Check is inactive" in result.error.details

    async def test_missing_invoice(self, record_payment, mock_invoice_repo):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)

        result = await record_payment.execute(42, RecordPaymentCommandDTO(amount="10.00", payment_method_id=1))

        assert result.is_err()
        assert result.error.code == "NOT_FOUND"

    async def test_receipt_sent_for_confirmed_method(self, record_payment, mock_invoice_repo, mock_notifier, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="250.00", payment_method_id=1))

        assert result.is_ok()
        assert result.value.notification_failed is False
        mock_notifier.create_notification.assert_called_once()
        message = mock_notifier.send_email.call_args.args[0]
        assert message.to == "billing@acme.test"
        assert "Remaining balance: 750.00 USD" in message.body

    async def test_confirmation_method_holds_receipt(
        self, record_payment, mock_invoice_repo, mock_method_repo, mock_notifier, make_invoice
    ):
        """
        Given: A method that requires confirmation
        When: A payment is recorded
        Then: The amount counts, the payment is unconfirmed and no receipt goes out
        """
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_method_repo.get_by_id = AsyncMock(return_value=_method(2, "Bank Transfer", requires_confirmation=True))

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="250.00", payment_method_id=2))

        assert result.is_ok()
        assert result.value.payment.is_confirmed is False
        assert result.value.invoice.amount_paid == Decimal("250.00")
        notification_types = [c.args[0].type for c in mock_notifier.create_notification.call_args_list]
        assert notification_types == ["payment_received", "payment_needs_confirmation"]
        mock_notifier.send_email.assert_not_called()

    async def test_notifier_failure_keeps_payment(self, record_payment, mock_invoice_repo, mock_notifier, mock_uow, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_notifier.create_notification = AsyncMock(side_effect=Exception("webhook unreachable"))

        result = await record_payment.execute(1, RecordPaymentCommandDTO(amount="250.00", payment_method_id=1))

        assert result.is_ok()
        assert result.value.notification_failed is True
        mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
class TestDeletePayment:

    async def test_delete_reverses_amount(
        self, mock_uow, ledger, mock_invoice_repo, mock_payment_repo, mock_plan_repo, make_invoice
    ):
        """
        Given: A paid invoice with a 600.00 payment
        When: The payment is deleted
        Then: amount_paid drops to 400.00, status is partial and paid_at cleared
        """
        # Arrange
        invoice = make_invoice(
            status=InvoiceStatus.PAID, amount_paid=Decimal("1000.00"), paid_at=datetime(2025, 2, 20, 9, 0)
        )
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_payment_repo.get_by_id = AsyncMock(
            return_value=Payment(id=9, invoice_id=1, amount=Decimal("600.00"), payment_date=date(2025, 2, 20))
        )
        mock_plan_repo.get_installment_by_payment_id = AsyncMock(return_value=None)

        # Act
        result = await DeletePayment(mock_uow, ledger, mock_payment_repo, mock_plan_repo).execute(9)

        # Assert
        assert result.is_ok()
        assert result.value.payment is None
        assert result.value.invoice.amount_paid == Decimal("400.00")
        assert result.value.invoice.status == "partial"
        assert result.value.invoice.paid_at is None
        mock_payment_repo.delete.assert_called_once_with(9)
        mock_uow.commit.assert_called_once()

    async def test_delete_reopens_installment_and_plan(
        self, mock_uow, ledger, mock_invoice_repo, mock_payment_repo, mock_plan_repo, make_invoice
    ):
        invoice = make_invoice(status=InvoiceStatus.PAID, amount_paid=Decimal("1000.00"))
        installment = Installment(
            id=3, payment_plan_id=5, installment_number=2, amount=Decimal("500.00"),
            due_date=date(2025, 3, 15), status=InstallmentStatus.PAID, payment_id=9,
        )
        plan = PaymentPlan(
            id=5, invoice_id=1, name="2-month plan", total_installments=2,
            installments_paid=2, status=PaymentPlanStatus.COMPLETED,
        )
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_payment_repo.get_by_id = AsyncMock(
            return_value=Payment(id=9, invoice_id=1, amount=Decimal("500.00"), payment_date=date(2025, 2, 28))
        )
        mock_plan_repo.get_installment_by_payment_id = AsyncMock(return_value=installment)
        mock_plan_repo.get_by_id = AsyncMock(return_value=plan)

        result = await DeletePayment(mock_uow, ledger, mock_payment_repo, mock_plan_repo).execute(9)

        assert result.is_ok()
        assert installment.status == InstallmentStatus.PENDING
        assert installment.payment_id is None
        assert plan.installments_paid == 1
        assert plan.status == PaymentPlanStatus.ACTIVE

    async def test_delete_missing_payment(self, mock_uow, ledger, mock_payment_repo, mock_plan_repo):
        mock_payment_repo.get_by_id = AsyncMock(return_value=None)

        result = await DeletePayment(mock_uow, ledger, mock_payment_repo, mock_plan_repo).execute(9)

        assert result.is_err()
        assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
class TestPaymentPlans:

    async def test_plan_must_cover_remaining_balance(self, mock_uow, mock_invoice_repo, mock_plan_repo, make_invoice):
        """
        Given: 600.00 remaining on an invoice
        When: Installments add up to 500.00
        Then: VALIDATION_ERROR naming both totals
        """
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(amount_paid=Decimal("400.00")))
        mock_plan_repo.get_active_by_invoice_id = AsyncMock(return_value=None)
        mock_plan_repo.create = AsyncMock()
        command = CreatePaymentPlanCommandDTO(
            invoice_id=1,
            name="2-month plan",
            installments=[
                InstallmentInputDTO(amount="250.00", due_date=date(2025, 4, 1)),
                InstallmentInputDTO(amount="250.00", due_date=date(2025, 5, 1)),
            ],
        )

        result = await CreatePaymentPlan(mock_uow, mock_invoice_repo, mock_plan_repo).execute(command)

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert "installments: total of 500.00 does not match remaining balance of 600.00" in result.error.details
        mock_plan_repo.create.assert_not_called()

    async def test_one_active_plan_per_invoice(self, mock_uow, mock_invoice_repo, mock_plan_repo, make_invoice):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_plan_repo.get_active_by_invoice_id = AsyncMock(
            return_value=PaymentPlan(id=5, invoice_id=1, name="existing", total_installments=2)
        )
        command = CreatePaymentPlanCommandDTO(invoice_id=1, name="another", installments=[])

        result = await CreatePaymentPlan(mock_uow, mock_invoice_repo, mock_plan_repo).execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_OPERATION"

    async def test_last_installment_completes_plan(
        self, mock_uow, ledger, receipts, mock_invoice_repo, mock_plan_repo, make_invoice
    ):
        """
        Given: An active plan with one of two installments paid
        When: The last installment is paid without an explicit amount
        Then: The installment amount is charged and the plan completes
        """
        # Arrange
        invoice = make_invoice(status=InvoiceStatus.PARTIAL, amount_paid=Decimal("500.00"))
        installment = Installment(
            id=4, payment_plan_id=5, installment_number=2, amount=Decimal("500.00"), due_date=date(2025, 3, 15),
        )
        plan = PaymentPlan(
            id=5, invoice_id=1, name="2-month plan", total_installments=2, installments_paid=1,
        )
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_plan_repo.get_installment = AsyncMock(return_value=installment)
        mock_plan_repo.get_by_id = AsyncMock(return_value=plan)
        mock_plan_repo.get_installments = AsyncMock(return_value=[installment])
        use_case = RecordInstallmentPayment(mock_uow, ledger, mock_plan_repo, receipts)

        # Act
        result = await use_case.execute(4, RecordPaymentCommandDTO(payment_method_id=1))

        # Assert
        assert result.is_ok()
        assert result.value.installment.status == "paid"
        assert result.value.installment.payment_id == 501
        assert result.value.plan.status == "completed"
        assert result.value.plan.installments_paid == 2
        assert result.value.invoice.status == "paid"
        mock_uow.commit.assert_called_once()

    async def test_installment_amount_must_match(
        self, mock_uow, ledger, receipts, mock_invoice_repo, mock_plan_repo, make_invoice
    ):
        installment = Installment(
            id=4, payment_plan_id=5, installment_number=1, amount=Decimal("500.00"), due_date=date(2025, 3, 15),
        )
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_plan_repo.get_installment = AsyncMock(return_value=installment)
        mock_plan_repo.get_by_id = AsyncMock(
            return_value=PaymentPlan(id=5, invoice_id=1, name="plan", total_installments=2)
        )
        use_case = RecordInstallmentPayment(mock_uow, ledger, mock_plan_repo, receipts)

        result = await use_case.execute(4, RecordPaymentCommandDTO(amount="450.00", payment_method_id=1))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert installment.status == InstallmentStatus.PENDING


def _record_locks(name, value, calls):
    async def _get(entity_id, for_update=False):
        if for_update:
            calls.append(name)
        return value
    return AsyncMock(side_effect=_get)


@pytest.mark.asyncio
class TestPaymentLockOrder:

    async def test_installment_payment_locks_invoice_first(
        self, mock_uow, ledger, receipts, mock_invoice_repo, mock_plan_repo, make_invoice
    ):
        """
        Given: An active plan with a pending installment
        When: The installment is paid
        Then: Rows are locked invoice, plan, installment, the order DeletePayment uses
        """
        # Arrange
        calls = []
        invoice = make_invoice(status=InvoiceStatus.PARTIAL, amount_paid=Decimal("500.00"))
        installment = Installment(
            id=4, payment_plan_id=5, installment_number=2, amount=Decimal("500.00"), due_date=date(2025, 3, 15),
        )
        plan = PaymentPlan(id=5, invoice_id=1, name="2-month plan", total_installments=2, installments_paid=1)
        mock_invoice_repo.get_by_id = _record_locks("invoice", invoice, calls)
        mock_plan_repo.get_by_id = _record_locks("plan", plan, calls)
        mock_plan_repo.get_installment = _record_locks("installment", installment, calls)
        mock_plan_repo.get_installments = AsyncMock(return_value=[installment])

        # Act
        result = await RecordInstallmentPayment(mock_uow, ledger, mock_plan_repo, receipts).execute(
            4, RecordPaymentCommandDTO(payment_method_id=1)
        )

        # Assert
        assert result.is_ok()
        assert calls[:3] == ["invoice", "plan", "installment"]

    async def test_delete_payment_locks_invoice_then_plan(
        self, mock_uow, ledger, mock_invoice_repo, mock_payment_repo, mock_plan_repo, make_invoice
    ):
        calls = []
        invoice = make_invoice(status=InvoiceStatus.PAID, amount_paid=Decimal("1000.00"))
        installment = Installment(
            id=3, payment_plan_id=5, installment_number=2, amount=Decimal("500.00"),
            due_date=date(2025, 3, 15), status=InstallmentStatus.PAID, payment_id=9,
        )
        plan = PaymentPlan(
            id=5, invoice_id=1, name="2-month plan", total_installments=2,
            installments_paid=2, status=PaymentPlanStatus.COMPLETED,
        )
        mock_invoice_repo.get_by_id = _record_locks("invoice", invoice, calls)
        mock_plan_repo.get_by_id = _record_locks("plan", plan, calls)
        mock_plan_repo.get_installment_by_payment_id = AsyncMock(return_value=installment)

        async def _update_installment(updated):
            calls.append("installment")
            return updated
        mock_plan_repo.update_installment = AsyncMock(side_effect=_update_installment)
        mock_payment_repo.get_by_id = AsyncMock(
            return_value=Payment(id=9, invoice_id=1, amount=Decimal("500.00"), payment_date=date(2025, 2, 28))
        )

        result = await DeletePayment(mock_uow, ledger, mock_payment_repo, mock_plan_repo).execute(9)

        assert result.is_ok()
        assert calls == ["invoice", "plan", "installment"]
