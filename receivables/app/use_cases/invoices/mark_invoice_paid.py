"""MarkInvoicePaid Use Case

Settles an invoice's outstanding balance in one step.
"""

import logging
from decimal import Decimal
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.use_cases.payments.dtos import PaymentResultDTO, PaymentResponseDTO, InvoiceBalanceDTO
from receivables.app.use_cases.payments.ledger import PaymentLedger
from receivables.app.use_cases.payments.receipts import PaymentReceipts
from receivables.domain.base import to_money
from receivables.domain.errors import LedgerError
from receivables.domain.invoice import InvoiceStatus
from receivables.domain.lifecycle import ensure_payable
from .dtos import MarkInvoicePaidCommandDTO

logger = logging.getLogger(__name__)


class MarkInvoicePaid:
    """
    Use Case: Mark an invoice as paid

    Business Rules:
    1. Same preconditions as recording a payment
    2. The outstanding balance is recorded as a payment, so amount_paid
       still equals the sum of payments
    3. Without a payment method the payment is unattributed
    4. A zero-total invoice is flipped to paid directly
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

    async def execute(self, invoice_id: int, command: MarkInvoicePaidCommandDTO) -> Result[PaymentResultDTO]:
        try:
            invoice = await self.ledger.lock_invoice(invoice_id)
            ensure_payable(invoice)

            remaining = to_money(Decimal(invoice.total_amount) - Decimal(invoice.amount_paid))
            if remaining <= 0:
                invoice.status = InvoiceStatus.PAID
                invoice.paid_at = invoice.paid_at or self.ledger.clock.now()
                invoice = await self.ledger.invoice_repo.update(invoice)
                await self.uow.commit()
                return Return.ok(PaymentResultDTO(payment=None, invoice=InvoiceBalanceDTO.from_entity(invoice)))

            recorded = await self.ledger.record(
                invoice_id,
                amount=remaining,
                payment_method_id=command.payment_method_id,
                payment_date=command.payment_date,
                reference=command.reference,
                notes=command.notes or "Marked as paid",
                require_method=command.payment_method_id is not None,
            )
            await self.uow.commit()
        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="MARK_INVOICE_PAID_FAILED",
                    message="Failed to mark invoice as paid",
                    reason=str(e),
                )
            )

        logger.info(f"Marked invoice {recorded.invoice.invoice_number} as paid")
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
