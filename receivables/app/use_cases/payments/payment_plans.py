"""Payment Plan Use Cases

Installment plans split an invoice's remaining balance into dated
installments that are paid one at a time.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.notifier import Notifier, EmailMessage
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.payment_plan_repository import PaymentPlanRepository
from receivables.domain.base import to_money
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError, InvalidOperationError
from receivables.domain.lifecycle import ensure_payable
from receivables.domain.payment_plan import (
    PaymentPlan,
    PaymentPlanStatus,
    Installment,
    InstallmentStatus,
)
from .dtos import (
    CreatePaymentPlanCommandDTO,
    PaymentPlanDTO,
    RecordPaymentCommandDTO,
    InstallmentDTO,
    InstallmentPaymentResultDTO,
    InstallmentReminderResultDTO,
    PaymentResponseDTO,
    InvoiceBalanceDTO,
)
from .ledger import PaymentLedger, parse_payment_amount
from .receipts import PaymentReceipts

logger = logging.getLogger(__name__)

MIN_INSTALLMENTS = 2


class CreatePaymentPlan:
    """
    Use Case: Split an invoice's remaining balance into installments

    Business Rules:
    1. Invoice must be payable (issued, unpaid, not canceled)
    2. At most one active plan per invoice
    3. At least 2 installments, each with a positive amount and a due date
    4. total_installments, when given, equals the number of installments
    5. Installment amounts add up to total_amount - amount_paid exactly
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        plan_repo: PaymentPlanRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.plan_repo = plan_repo

    async def execute(self, command: CreatePaymentPlanCommandDTO) -> Result[PaymentPlanDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", command.invoice_id)
            ensure_payable(invoice)

            active_plan = await self.plan_repo.get_active_by_invoice_id(invoice.id)
            if active_plan:
                raise InvalidOperationError(
                    "Invoice already has an active payment plan",
                    reason=f"plan {active_plan.id} is active",
                )

            errors: List[str] = []
            if not command.name.strip():
                errors.append("name is required")
            if len(command.installments) < MIN_INSTALLMENTS:
                errors.append(f"installments: at least {MIN_INSTALLMENTS} installments are required")
            if command.total_installments is not None and command.total_installments != len(command.installments):
                errors.append(
                    f"total_installments: expected {command.total_installments} installments, "
                    f"got {len(command.installments)}"
                )

            amounts = []
            for index, item in enumerate(command.installments):
                amount = parse_payment_amount(item.amount, errors, field=f"installments[{index}].amount")
                if item.due_date is None:
                    errors.append(f"installments[{index}].due_date is required")
                if amount is not None:
                    amounts.append(amount)

            remaining = to_money(Decimal(invoice.total_amount) - Decimal(invoice.amount_paid))
            if not errors:
                planned = to_money(sum(amounts, Decimal("0")))
                if planned != remaining:
                    errors.append(
                        f"installments: total of {planned} does not match remaining balance of {remaining}"
                    )
            if errors:
                raise ValidationError(errors, message="Invalid payment plan")

            installments = [
                Installment(
                    payment_plan_id=0,
                    installment_number=number,
                    amount=amount,
                    due_date=item.due_date,
                    notes=item.notes,
                )
                for number, (amount, item) in enumerate(zip(amounts, command.installments), start=1)
            ]
            plan = await self.plan_repo.create(
                PaymentPlan(
                    invoice_id=invoice.id,
                    name=command.name.strip(),
                    description=command.description,
                    total_installments=len(installments),
                ),
                installments,
            )
            created_installments = await self.plan_repo.get_installments(plan.id)

            await self.uow.commit()

            logger.info(
                f"Created payment plan {plan.id} for invoice {invoice.invoice_number} "
                f"with {plan.total_installments} installments"
            )
            return Return.ok(PaymentPlanDTO.from_entity(plan, created_installments))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create payment plan for invoice {command.invoice_id}: {e}")
            return Return.err(
                Error(
                    code="CREATE_PAYMENT_PLAN_FAILED",
                    message="Failed to create payment plan",
                    reason=str(e),
                )
            )


class GetPaymentPlan:
    def __init__(self, plan_repo: PaymentPlanRepository):
        self.plan_repo = plan_repo

    async def execute(self, plan_id: int) -> Result[PaymentPlanDTO]:
        plan = await self.plan_repo.get_by_id(plan_id)
        if not plan:
            return Return.err(NotFoundError("Payment plan", plan_id).to_error())
        installments = await self.plan_repo.get_installments(plan.id)
        return Return.ok(PaymentPlanDTO.from_entity(plan, installments))


class ListPaymentPlans:
    """Every plan ever created for an invoice, including canceled ones"""

    def __init__(self, invoice_repo: InvoiceRepository, plan_repo: PaymentPlanRepository):
        self.invoice_repo = invoice_repo
        self.plan_repo = plan_repo

    async def execute(self, invoice_id: int) -> Result[list]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(NotFoundError("Invoice", invoice_id).to_error())
        plans = await self.plan_repo.get_by_invoice_id(invoice_id)
        result = []
        for plan in plans:
            result.append(PaymentPlanDTO.from_entity(plan, await self.plan_repo.get_installments(plan.id)))
        return Return.ok(result)


class CancelPaymentPlan:
    """
    Use Case: Abandon a payment plan

    Pending installments become canceled; paid installments and their
    payments stay on the ledger.
    """

    def __init__(self, uow: UnitOfWork, plan_repo: PaymentPlanRepository):
        self.uow = uow
        self.plan_repo = plan_repo

    async def execute(self, plan_id: int) -> Result[PaymentPlanDTO]:
        try:
            plan = await self.plan_repo.get_by_id(plan_id, for_update=True)
            if not plan:
                raise NotFoundError("Payment plan", plan_id)
            if plan.status != PaymentPlanStatus.ACTIVE:
                raise InvalidOperationError(
                    "Only active payment plans can be canceled",
                    reason=f"plan {plan_id} is {plan.status.value}",
                )

            installments = await self.plan_repo.get_installments(plan.id)
            for installment in installments:
                if installment.status == InstallmentStatus.PENDING:
                    installment.status = InstallmentStatus.CANCELED
                    await self.plan_repo.update_installment(installment)

            plan.status = PaymentPlanStatus.CANCELED
            plan = await self.plan_repo.update(plan)
            await self.uow.commit()

            logger.info(f"Canceled payment plan {plan_id}")
            return Return.ok(PaymentPlanDTO.from_entity(plan, installments))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_PAYMENT_PLAN_FAILED",
                    message="Failed to cancel payment plan",
                    reason=str(e),
                )
            )


class RecordInstallmentPayment:
    """
    Use Case: Pay one installment of an active plan

    Business Rules:
    1. Installment must be pending and its plan active
    2. Amount defaults to the installment amount and must equal it exactly
    3. The payment goes through the same ledger path as RecordPayment
    4. Installment is linked to the payment; the plan completes when
       every installment is paid

    Flow:
    1. Lock invoice, then plan, then installment
    2. Validate exact amount
    3. Record payment on the invoice
    4. Mark installment paid, bump plan counter
    5. Commit transaction, then notify
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: PaymentLedger,
        plan_repo: PaymentPlanRepository,
        receipts: PaymentReceipts,
    ):
        self.uow = uow
        self.ledger = ledger
        self.plan_repo = plan_repo
        self.receipts = receipts

    async def execute(self, installment_id: int, command: RecordPaymentCommandDTO) -> Result[InstallmentPaymentResultDTO]:
        try:
            installment = await self.plan_repo.get_installment(installment_id)
            if not installment:
                raise NotFoundError("Installment", installment_id)
            plan = await self.plan_repo.get_by_id(installment.payment_plan_id)
            if not plan:
                raise NotFoundError("Payment plan", installment.payment_plan_id)

            # Lock order: invoice, plan, installment (same as DeletePayment)
            await self.ledger.lock_invoice(plan.invoice_id)
            plan = await self.plan_repo.get_by_id(plan.id, for_update=True)
            installment = await self.plan_repo.get_installment(installment_id, for_update=True)

            if installment.status != InstallmentStatus.PENDING:
                raise InvalidOperationError(
                    f"Installment is already {installment.status.value}",
                    reason=f"installment {installment_id} is not pending",
                )
            if plan.status != PaymentPlanStatus.ACTIVE:
                raise InvalidOperationError(
                    "Payment plan is not active",
                    reason=f"plan {plan.id} is {plan.status.value}",
                )

            errors: List[str] = []
            raw_amount = installment.amount if command.amount in (None, "") else command.amount
            amount = parse_payment_amount(raw_amount, errors)
            if amount is not None and amount != Decimal(installment.amount):
                errors.append(
                    f"amount: payment of {amount} must equal the installment amount of {installment.amount}"
                )
            if errors:
                raise ValidationError(errors, message="Invalid installment payment")

            recorded = await self.ledger.record(
                plan.invoice_id,
                amount=amount,
                payment_method_id=command.payment_method_id,
                payment_date=command.payment_date,
                reference=command.reference,
                notes=command.notes or f"Installment {installment.installment_number} of {plan.name}",
                is_confirmed=command.is_confirmed,
            )

            installment.status = InstallmentStatus.PAID
            installment.payment_id = recorded.payment.id
            installment = await self.plan_repo.update_installment(installment)

            plan.installments_paid += 1
            if plan.installments_paid >= plan.total_installments:
                plan.status = PaymentPlanStatus.COMPLETED
            plan = await self.plan_repo.update(plan)
            installments = await self.plan_repo.get_installments(plan.id)

            await self.uow.commit()
        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to pay installment {installment_id}: {e}")
            return Return.err(
                Error(
                    code="RECORD_INSTALLMENT_PAYMENT_FAILED",
                    message="Failed to record installment payment",
                    reason=str(e),
                )
            )

        logger.info(
            f"Paid installment {installment.installment_number}/{plan.total_installments} "
            f"of plan {plan.id}, plan status={plan.status.value}"
        )
        notification_failed = await self.receipts.payment_recorded(
            recorded.invoice, recorded.payment, recorded.method
        )

        return Return.ok(
            InstallmentPaymentResultDTO(
                installment=InstallmentDTO.from_entity(installment),
                plan=PaymentPlanDTO.from_entity(plan, installments),
                payment=PaymentResponseDTO.from_entity(recorded.payment, recorded.method),
                invoice=InvoiceBalanceDTO.from_entity(recorded.invoice),
                notification_failed=notification_failed,
            )
        )


class SendInstallmentReminders:
    """
    Use Case: Remind clients of upcoming installments

    Each pending installment due within the look-ahead window gets one
    reminder; reminder_sent keeps later runs from repeating it.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        plan_repo: PaymentPlanRepository,
        client_directory: ClientDirectory,
        notifier: Notifier,
        clock: Clock,
        company_name: str = "Receivables",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.plan_repo = plan_repo
        self.client_directory = client_directory
        self.notifier = notifier
        self.clock = clock
        self.company_name = company_name

    async def execute(self, days_ahead: int = 7) -> Result[InstallmentReminderResultDTO]:
        try:
            today = self.clock.today()
            installments = await self.plan_repo.list_pending_installments_due(
                today, today + timedelta(days=days_ahead)
            )

            sent_ids = []
            failed = 0
            for installment in installments:
                if await self._remind(installment):
                    installment.reminder_sent = True
                    await self.plan_repo.update_installment(installment)
                    sent_ids.append(installment.id)
                else:
                    failed += 1

            await self.uow.commit()

            logger.info(f"Installment reminders: {len(sent_ids)} sent, {failed} failed of {len(installments)}")
            return Return.ok(
                InstallmentReminderResultDTO(
                    checked=len(installments),
                    reminders_sent=len(sent_ids),
                    failed=failed,
                    installment_ids=sent_ids,
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="INSTALLMENT_REMINDERS_FAILED",
                    message="Failed to send installment reminders",
                    reason=str(e),
                )
            )

    async def _remind(self, installment: Installment) -> bool:
        try:
            plan = await self.plan_repo.get_by_id(installment.payment_plan_id)
            invoice = await self.invoice_repo.get_by_id(plan.invoice_id) if plan else None
            if not invoice:
                logger.warning(f"Installment {installment.id} has no invoice, skipping reminder")
                return False

            client = await self.client_directory.find_by_id(invoice.client_id)
            if not client or not client.email:
                logger.warning(f"No email for client {invoice.client_id}, cannot remind installment {installment.id}")
                return False

            result = await self.notifier.send_email(
                EmailMessage(
                    to=client.email,
                    subject=(
                        f"Payment Reminder: Installment {installment.installment_number} "
                        f"for Invoice #{invoice.invoice_number}"
                    ),
                    body=(
                        f"Dear {client.name},\n\n"
                        f"Installment {installment.installment_number} of {plan.total_installments} "
                        f"({installment.amount} {invoice.currency}) for invoice #{invoice.invoice_number} "
                        f"is due on {installment.due_date.isoformat()}.\n\n"
                        f"{self.company_name}"
                    ),
                    template="installment_reminder",
                    template_data={
                        "client_name": client.name,
                        "invoice_number": invoice.invoice_number,
                        "installment_number": installment.installment_number,
                        "amount": str(installment.amount),
                        "due_date": installment.due_date.isoformat(),
                    },
                )
            )
            if not result.success:
                logger.warning(f"Installment reminder {installment.id} failed: {result.error}")
            return result.success
        except Exception as e:
            logger.warning(f"Installment reminder {installment.id} failed: {e}")
            return False
