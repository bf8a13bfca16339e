"""ApplyLateFee Use Case"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.overdue_config_repository import OverdueConfigRepository
from receivables.domain.errors import LedgerError, NotFoundError
from .escalation import LateFeeApplier
from .dtos import ApplyLateFeeCommandDTO, LateFeeResultDTO

logger = logging.getLogger(__name__)


class ApplyLateFee:
    """
    Use Case: Apply a late fee to an invoice

    Business Rules:
    1. Fee = override or configured amount; percentage of the invoice total
    2. Rounded half-up to cents, added as a "Late Payment Fee" line
    3. Total grows by the fee, amount_paid is untouched, status re-derived
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        config_repo: OverdueConfigRepository,
        applier: LateFeeApplier,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.config_repo = config_repo
        self.applier = applier

    async def execute(self, invoice_id: int, command: ApplyLateFeeCommandDTO) -> Result[LateFeeResultDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)

            config = await self.config_repo.get()
            line = await self.applier.apply(invoice, config, amount=command.amount, fee_type=command.type)
            await self.uow.commit()

            return Return.ok(
                LateFeeResultDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    fee_amount=line.amount,
                    fee_type=(command.type or config.late_fee_type.value).lower(),
                    line_id=line.id,
                    total_amount=invoice.total_amount,
                    amount_paid=invoice.amount_paid,
                    remaining_balance=invoice.remaining_balance,
                    status=invoice.status.value,
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to apply late fee to invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="APPLY_LATE_FEE_FAILED",
                    message="Failed to apply late fee",
                    reason=str(e),
                )
            )
