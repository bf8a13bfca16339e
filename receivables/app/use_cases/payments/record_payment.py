"""RecordPayment Use Case

Records a payment against an invoice with pessimistic locking so the
overpayment check always sees a consistent balance.
"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.domain.errors import LedgerError
from .dtos import RecordPaymentCommandDTO, PaymentResultDTO, PaymentResponseDTO, InvoiceBalanceDTO
from .ledger import PaymentLedger
from .receipts import PaymentReceipts

logger = logging.getLogger(__name__)


class RecordPayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. Invoice must exist and be issued, unpaid and not canceled
    2. 0 < amount <= remaining balance, at most 2 decimals
    3. Payment method must exist and be active
    4. Payment insert, amount_paid and status change commit together
    5. Notifications run after commit and never undo the payment

    Flow:
    1. Lock invoice (SELECT FOR UPDATE)
    2. Validate amount and method
    3. Insert payment, increment amount_paid, recompute status
    4. Commit transaction
    5. Notify (received / needs confirmation / receipt)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: PaymentLedger,
        receipts: PaymentReceipts,
    ):
        self.uow = uow
        self.ledger = ledger
        self.receipts = receipts

    async def execute(self, invoice_id: int, command: RecordPaymentCommandDTO) -> Result[PaymentResultDTO]:
        """
        Execute payment recording

        Args:
            invoice_id: Invoice to pay
            command: RecordPaymentCommandDTO with amount and method

        Returns:
            Result[PaymentResultDTO]: Success with payment and invoice balance or error

        Errors:
            NOT_FOUND: Invoice does not exist
            INVALID_OPERATION: Invoice is canceled, draft or already paid
            VALIDATION_ERROR: Bad amount, overpayment, unknown/inactive method
            RECORD_PAYMENT_FAILED: Unexpected persistence failure
        """
        try:
            recorded = await self.ledger.record(
                invoice_id,
                amount=command.amount,
                payment_method_id=command.payment_method_id,
                payment_date=command.payment_date,
                reference=command.reference,
                notes=command.notes,
                is_confirmed=command.is_confirmed,
            )
            await self.uow.commit()
        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record payment on invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="RECORD_PAYMENT_FAILED",
                    message="Failed to record payment",
                    reason=str(e),
                )
            )

        notification_failed = await self.receipts.payment_recorded(
            recorded.invoice, recorded.payment, recorded.method
        )

        return Return.ok(
            PaymentResultDTO(
                payment=PaymentResponseDTO.from_entity(recorded.payment, recorded.method),
                invoice=InvoiceBalanceDTO.from_entity(recorded.invoice),
                notification_failed=notification_failed,
            )
        )
