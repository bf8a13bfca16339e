"""DeletePayment Use Case

Removes a payment and reverses its effect on the invoice and any
installment it settled.
"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.app.repositories.payment_plan_repository import PaymentPlanRepository
from receivables.domain.errors import LedgerError, NotFoundError
from receivables.domain.payment_plan import InstallmentStatus, PaymentPlanStatus
from .dtos import PaymentResultDTO, InvoiceBalanceDTO
from .ledger import PaymentLedger

logger = logging.getLogger(__name__)


class DeletePayment:
    """
    Use Case: Delete a payment

    Business Rules:
    1. amount_paid drops by the payment amount, never below zero
    2. Status is re-derived (paid -> partial, partial -> pending/sent/overdue)
    3. A settled installment goes back to pending and its plan's paid
       count drops; a completed plan becomes active again

    Flow:
    1. Load payment, lock invoice
    2. Lock plan, unlink installment
    3. Delete payment and reverse amount
    4. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: PaymentLedger,
        payment_repo: PaymentRepository,
        plan_repo: PaymentPlanRepository,
    ):
        self.uow = uow
        self.ledger = ledger
        self.payment_repo = payment_repo
        self.plan_repo = plan_repo

    async def execute(self, payment_id: int) -> Result[PaymentResultDTO]:
        try:
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                raise NotFoundError("Payment", payment_id)

            invoice = await self.ledger.lock_invoice(payment.invoice_id)

            installment = await self.plan_repo.get_installment_by_payment_id(payment.id)
            if installment:
                plan = await self.plan_repo.get_by_id(installment.payment_plan_id, for_update=True)
                if plan:
                    plan.installments_paid = max(0, plan.installments_paid - 1)
                    if plan.status == PaymentPlanStatus.COMPLETED:
                        plan.status = PaymentPlanStatus.ACTIVE
                    await self.plan_repo.update(plan)

                installment.status = InstallmentStatus.PENDING
                installment.payment_id = None
                await self.plan_repo.update_installment(installment)

            await self.payment_repo.delete(payment.id)
            invoice = await self.ledger.reverse(invoice, payment.amount)

            await self.uow.commit()

            logger.info(
                f"Deleted payment {payment_id} of {payment.amount} from invoice {invoice.invoice_number}, "
                f"status={invoice.status.value}"
            )
            return Return.ok(PaymentResultDTO(payment=None, invoice=InvoiceBalanceDTO.from_entity(invoice)))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to delete payment {payment_id}: {e}")
            return Return.err(
                Error(
                    code="DELETE_PAYMENT_FAILED",
                    message="Failed to delete payment",
                    reason=str(e),
                )
            )
