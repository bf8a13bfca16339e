"""Payment API Routes

FastAPI routes for payments, payment methods and installment plans.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from receivables.adapter.repositories.payment_method_repository import SqlAlchemyPaymentMethodRepository
from receivables.adapter.repositories.payment_plan_repository import SqlAlchemyPaymentPlanRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier
from receivables.app.use_cases.payments import (
    PaymentLedger,
    PaymentReceipts,
    RecordPayment,
    UpdatePayment,
    ConfirmPayment,
    DeletePayment,
    ListPayments,
    GetPaymentStatistics,
    ListPaymentMethods,
    CreatePaymentMethod,
    UpdatePaymentMethod,
    DeletePaymentMethod,
    CreatePaymentPlan,
    GetPaymentPlan,
    ListPaymentPlans,
    CancelPaymentPlan,
    RecordInstallmentPayment,
    SendInstallmentReminders,
    RecordPaymentCommandDTO,
    UpdatePaymentCommandDTO,
    PaymentStatisticsQueryDTO,
    CreatePaymentMethodCommandDTO,
    UpdatePaymentMethodCommandDTO,
    CreatePaymentPlanCommandDTO,
)
from receivables.depends import get_session, get_clock, get_notifier
from receivables.api.error import ClientError
from receivables.api.response import ok

router = APIRouter(prefix="/payments", tags=["Payments"])


def _ledger(session: AsyncSession, clock: Clock) -> PaymentLedger:
    return PaymentLedger(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentMethodRepository(session),
        clock,
    )


def _receipts(session: AsyncSession, notifier: Notifier) -> PaymentReceipts:
    return PaymentReceipts(notifier, SqlClientDirectory(session), ApplicationConfig.COMPANY_NAME)


@router.get("/statistics")
async def get_payment_statistics(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    """Payment count, total and average, overall and per method"""
    use_case = GetPaymentStatistics(
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentMethodRepository(session),
    )
    result = await use_case.execute(PaymentStatisticsQueryDTO(start_date=start_date, end_date=end_date))

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Payment methods

@router.get("/methods")
async def list_payment_methods(
    active_only: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    result = await ListPaymentMethods(SqlAlchemyPaymentMethodRepository(session)).execute(active_only)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/methods", status_code=status.HTTP_201_CREATED)
async def create_payment_method(
    command: CreatePaymentMethodCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = CreatePaymentMethod(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentMethodRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.patch("/methods/{method_id}")
async def update_payment_method(
    method_id: int,
    command: UpdatePaymentMethodCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdatePaymentMethod(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentMethodRepository(session))
    result = await use_case.execute(method_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.delete("/methods/{method_id}")
async def delete_payment_method(method_id: int, session: AsyncSession = Depends(get_session)):
    """
    Delete a payment method.

    A method referenced by payments is deactivated instead of removed.
    """
    use_case = DeletePaymentMethod(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentMethodRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(method_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Payment plans

@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_payment_plan(
    command: CreatePaymentPlanCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """
    Split an invoice's remaining balance into installments.

    Installment amounts must add up to the remaining balance exactly.
    """
    use_case = CreatePaymentPlan(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/plans/{plan_id}")
async def get_payment_plan(plan_id: int, session: AsyncSession = Depends(get_session)):
    result = await GetPaymentPlan(SqlAlchemyPaymentPlanRepository(session)).execute(plan_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/plans/{plan_id}/cancel")
async def cancel_payment_plan(plan_id: int, session: AsyncSession = Depends(get_session)):
    use_case = CancelPaymentPlan(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentPlanRepository(session))
    result = await use_case.execute(plan_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/installments/reminders")
async def send_installment_reminders(
    days_ahead: int = Query(
        default=ApplicationConfig.INSTALLMENT_REMINDER_DAYS_AHEAD, ge=0,
        description="Remind for installments due within this many days"
    ),
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    use_case = SendInstallmentReminders(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
        SqlClientDirectory(session),
        notifier,
        clock,
        company_name=ApplicationConfig.COMPANY_NAME,
    )
    result = await use_case.execute(days_ahead=days_ahead)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/installments/{installment_id}/pay")
async def pay_installment(
    installment_id: int,
    command: RecordPaymentCommandDTO,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Pay one installment.

    Records a payment on the plan's invoice; the amount defaults to the
    installment amount.
    """
    use_case = RecordInstallmentPayment(
        SqlAlchemyUnitOfWork(session),
        _ledger(session, clock),
        SqlAlchemyPaymentPlanRepository(session),
        _receipts(session, notifier),
    )
    result = await use_case.execute(installment_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Payments by invoice

@router.post(
    "/invoices/{invoice_id}",
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Invoice not found"},
        409: {"description": "Invoice is draft, canceled or already paid"},
        422: {"description": "Invalid amount or method, or amount above the remaining balance"},
    }
)
async def record_payment(
    invoice_id: int,
    command: RecordPaymentCommandDTO,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Record a payment against an invoice.

    **Example request:**
    ```json
    {"amount": "400.00", "payment_method_id": 1, "reference": "CHK-1042"}
    ```

    **Returns:**
    - 201: Payment recorded; the response carries the updated invoice balance
    - 404: Invoice not found
    - 409: Invoice cannot take payments
    - 422: Invalid payment data or amount above the remaining balance
    """
    use_case = RecordPayment(
        SqlAlchemyUnitOfWork(session),
        _ledger(session, clock),
        _receipts(session, notifier),
    )
    result = await use_case.execute(invoice_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/invoices/{invoice_id}")
async def list_invoice_payments(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Payments of an invoice, newest first"""
    use_case = ListPayments(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentMethodRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/invoices/{invoice_id}/plans")
async def list_invoice_payment_plans(invoice_id: int, session: AsyncSession = Depends(get_session)):
    use_case = ListPaymentPlans(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Single payment

@router.patch("/{payment_id}")
async def update_payment(
    payment_id: int,
    command: UpdatePaymentCommandDTO,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Change a payment; an amount change is re-applied to the invoice balance"""
    use_case = UpdatePayment(
        SqlAlchemyUnitOfWork(session),
        _ledger(session, clock),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
    )
    result = await use_case.execute(payment_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: int,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Delete a payment and take its amount back off the invoice"""
    use_case = DeletePayment(
        SqlAlchemyUnitOfWork(session),
        _ledger(session, clock),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
    )
    result = await use_case.execute(payment_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{payment_id}/confirm")
async def confirm_payment(
    payment_id: int,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """Confirm a payment whose method requires confirmation and send the receipt"""
    use_case = ConfirmPayment(
        SqlAlchemyUnitOfWork(session),
        _ledger(session, clock),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentMethodRepository(session),
        _receipts(session, notifier),
    )
    result = await use_case.execute(payment_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)
