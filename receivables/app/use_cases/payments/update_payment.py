"""UpdatePayment and ConfirmPayment Use Cases"""

import logging
from decimal import Decimal
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.app.repositories.payment_method_repository import PaymentMethodRepository
from receivables.app.repositories.payment_plan_repository import PaymentPlanRepository
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError, InvalidOperationError
from receivables.domain.invoice import InvoiceStatus
from .dtos import UpdatePaymentCommandDTO, PaymentResultDTO, PaymentResponseDTO, InvoiceBalanceDTO
from .ledger import PaymentLedger, parse_payment_amount
from .receipts import PaymentReceipts

logger = logging.getLogger(__name__)


class UpdatePayment:
    """
    Use Case: Correct a recorded payment

    Business Rules:
    1. Payments on canceled invoices are frozen
    2. A new amount is checked against remaining balance + old amount
    3. Installment payments keep the installment amount
    4. Invoice amount_paid and status follow the change
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

    async def execute(self, payment_id: int, command: UpdatePaymentCommandDTO) -> Result[PaymentResultDTO]:
        try:
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                raise NotFoundError("Payment", payment_id)

            invoice = await self.ledger.lock_invoice(payment.invoice_id)
            if invoice.status == InvoiceStatus.CANCELED:
                raise InvalidOperationError(
                    "Cannot modify a payment on a canceled invoice",
                    reason=f"invoice {invoice.invoice_number} is canceled",
                )

            errors = []
            new_amount = None
            if command.amount is not None:
                new_amount = parse_payment_amount(command.amount, errors)
            method = None
            if command.payment_method_id is not None:
                method = await self.ledger.resolve_method(command.payment_method_id, errors)
            if errors:
                raise ValidationError(errors, message="Invalid payment data")

            if new_amount is not None and new_amount != Decimal(payment.amount):
                installment = await self.plan_repo.get_installment_by_payment_id(payment.id)
                if installment:
                    raise InvalidOperationError(
                        "Cannot change the amount of an installment payment",
                        reason=f"payment {payment.id} settles installment {installment.installment_number}",
                    )
                invoice = await self.ledger.change_amount(invoice, Decimal(payment.amount), new_amount)
                payment.amount = new_amount

            if method is not None:
                payment.payment_method_id = method.id
            if command.payment_date is not None:
                payment.payment_date = command.payment_date
            if command.reference is not None:
                payment.reference = command.reference
            if command.notes is not None:
                payment.notes = command.notes

            payment = await self.payment_repo.update(payment)
            await self.uow.commit()

            logger.info(f"Updated payment {payment.id} on invoice {invoice.invoice_number}")
            return Return.ok(
                PaymentResultDTO(
                    payment=PaymentResponseDTO.from_entity(payment, method),
                    invoice=InvoiceBalanceDTO.from_entity(invoice),
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to update payment {payment_id}: {e}")
            return Return.err(
                Error(
                    code="UPDATE_PAYMENT_FAILED",
                    message="Failed to update payment",
                    reason=str(e),
                )
            )


class ConfirmPayment:
    """
    Use Case: Confirm a payment whose method requires confirmation

    Confirming releases the client receipt. Confirming twice is an
    invalid operation.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: PaymentLedger,
        payment_repo: PaymentRepository,
        method_repo: PaymentMethodRepository,
        receipts: PaymentReceipts,
    ):
        self.uow = uow
        self.ledger = ledger
        self.payment_repo = payment_repo
        self.method_repo = method_repo
        self.receipts = receipts

    async def execute(self, payment_id: int) -> Result[PaymentResultDTO]:
        try:
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                raise NotFoundError("Payment", payment_id)
            if payment.is_confirmed:
                raise InvalidOperationError(
                    "Payment is already confirmed",
                    reason=f"payment {payment_id} was confirmed earlier",
                )

            invoice = await self.ledger.lock_invoice(payment.invoice_id)
            payment.is_confirmed = True
            payment = await self.payment_repo.update(payment)
            method = None
            if payment.payment_method_id is not None:
                method = await self.method_repo.get_by_id(payment.payment_method_id)

            await self.uow.commit()
        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to confirm payment {payment_id}: {e}")
            return Return.err(
                Error(
                    code="CONFIRM_PAYMENT_FAILED",
                    message="Failed to confirm payment",
                    reason=str(e),
                )
            )

        receipt_sent = await self.receipts.send_receipt(invoice, payment, method)

        logger.info(f"Confirmed payment {payment.id} on invoice {invoice.invoice_number}")
        return Return.ok(
            PaymentResultDTO(
                payment=PaymentResponseDTO.from_entity(payment, method),
                invoice=InvoiceBalanceDTO.from_entity(invoice),
                notification_failed=not receipt_sent,
            )
        )
