"""GetInvoiceSummary Use Case

Receivables summary by status, served through the cache.
"""

import logging
from decimal import Decimal
from receivables.libs.result import Result, Return, Error
from receivables.app.services.cache import Cache
from receivables.app.services.clock import Clock
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.domain.base import to_money
from receivables.domain.invoice import InvoiceStatus
from .dtos import InvoiceSummaryDTO, StatusSummaryDTO

logger = logging.getLogger(__name__)

CACHE_KEY = "invoices:summary"

_NOT_BILLED = (InvoiceStatus.DRAFT, InvoiceStatus.CANCELED)


class GetInvoiceSummary:
    """
    Use Case: Summarize receivables

    Business Rules:
    1. Draft and canceled invoices are counted but not billed
    2. collection_rate = collected / billed * 100, 0 when nothing billed
    3. Result is cached for ttl_seconds
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        cache: Cache,
        clock: Clock,
        ttl_seconds: int = 1800,
    ):
        self.invoice_repo = invoice_repo
        self.cache = cache
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    async def execute(self, refresh: bool = False) -> Result[InvoiceSummaryDTO]:
        try:
            if not refresh:
                cached = await self.cache.get(CACHE_KEY)
                if cached is not None:
                    return Return.ok(InvoiceSummaryDTO.model_validate(cached))

            totals = await self.invoice_repo.status_totals()

            by_status = {}
            total_invoices = 0
            billed = Decimal("0.00")
            collected = Decimal("0.00")
            for row in totals:
                status = InvoiceStatus(row.status)
                by_status[status.value] = StatusSummaryDTO(
                    count=row.count,
                    total_amount=to_money(row.total_amount),
                    amount_paid=to_money(row.amount_paid),
                )
                total_invoices += row.count
                if status not in _NOT_BILLED:
                    billed += Decimal(row.total_amount)
                    collected += Decimal(row.amount_paid)

            rate = float(round(collected / billed * 100, 2)) if billed > 0 else 0.0

            summary = InvoiceSummaryDTO(
                total_invoices=total_invoices,
                by_status=by_status,
                total_billed=to_money(billed),
                total_collected=to_money(collected),
                total_outstanding=to_money(billed - collected),
                collection_rate=rate,
                generated_at=self.clock.now(),
            )

            await self.cache.set(CACHE_KEY, summary.model_dump(mode="json"), self.ttl_seconds)
            return Return.ok(summary)

        except Exception as e:
            logger.error(f"Failed to build invoice summary: {e}")
            return Return.err(
                Error(
                    code="INVOICE_SUMMARY_FAILED",
                    message="Failed to build invoice summary",
                    reason=str(e),
                )
            )
