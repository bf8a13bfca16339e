"""Overdue listing and aging statistics"""

import logging
from decimal import Decimal
from typing import List
from receivables.libs.result import Result, Return, Error
from receivables.app.services.cache import Cache
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.clock import Clock
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.domain.base import to_money
from receivables.domain.escalation import AGING_BUCKETS, aging_bucket, days_overdue
from receivables.domain.invoice import COLLECTIBLE_STATUSES
from .dtos import OverdueQueryDTO, OverdueInvoiceDTO, OverdueStatisticsDTO, AgingBucketDTO
from .process_overdue import STATISTICS_CACHE_KEY

logger = logging.getLogger(__name__)


class GetOverdueInvoices:
    """
    Use Case: List past-due invoices

    Returns invoices that are sent, partial or overdue, due before today
    and not fully paid, oldest first, with client contact details.
    """

    def __init__(self, invoice_repo: InvoiceRepository, client_directory: ClientDirectory, clock: Clock):
        self.invoice_repo = invoice_repo
        self.client_directory = client_directory
        self.clock = clock

    async def execute(self, query: OverdueQueryDTO) -> Result[List[OverdueInvoiceDTO]]:
        try:
            today = self.clock.today()
            invoices = await self.invoice_repo.list_past_due(
                today, COLLECTIBLE_STATUSES, client_id=query.client_id
            )
            if query.client_name:
                matching = {client.id for client in await self.client_directory.find_by_name(query.client_name)}
                invoices = [invoice for invoice in invoices if invoice.client_id in matching]

            clients = {}
            results = []
            for invoice in invoices:
                overdue_days = days_overdue(invoice.due_date, today)
                if query.min_days_overdue is not None and overdue_days < query.min_days_overdue:
                    continue
                if invoice.client_id not in clients:
                    clients[invoice.client_id] = await self.client_directory.find_by_id(invoice.client_id)
                results.append(
                    OverdueInvoiceDTO.from_entity(
                        invoice, overdue_days, aging_bucket(overdue_days), clients[invoice.client_id]
                    )
                )
            return Return.ok(results)

        except Exception as e:
            logger.error(f"Failed to list overdue invoices: {e}")
            return Return.err(
                Error(
                    code="LIST_OVERDUE_FAILED",
                    message="Failed to list overdue invoices",
                    reason=str(e),
                )
            )


class GetOverdueStatistics:
    """
    Use Case: Aging statistics for past-due invoices

    Amounts are remaining balances. Cached for ttl_seconds; the overdue
    sweep invalidates the entry.
    """

    def __init__(self, invoice_repo: InvoiceRepository, cache: Cache, clock: Clock, ttl_seconds: int = 1800):
        self.invoice_repo = invoice_repo
        self.cache = cache
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    async def execute(self, refresh: bool = False) -> Result[OverdueStatisticsDTO]:
        try:
            if not refresh:
                cached = await self.cache.get(STATISTICS_CACHE_KEY)
                if cached is not None:
                    return Return.ok(OverdueStatisticsDTO.model_validate(cached))

            today = self.clock.today()
            invoices = await self.invoice_repo.list_past_due(today, COLLECTIBLE_STATUSES)

            buckets = {label: AgingBucketDTO() for label, _, _ in AGING_BUCKETS}
            total_amount = Decimal("0.00")
            total_days = 0
            for invoice in invoices:
                overdue_days = days_overdue(invoice.due_date, today)
                balance = Decimal(invoice.remaining_balance)
                total_amount += balance
                total_days += overdue_days
                label = aging_bucket(overdue_days)
                if label:
                    buckets[label].count += 1
                    buckets[label].amount = to_money(buckets[label].amount + balance)

            count = len(invoices)
            statistics = OverdueStatisticsDTO(
                total_count=count,
                total_amount=to_money(total_amount),
                average_days_overdue=round(total_days / count, 1) if count else 0.0,
                buckets=buckets,
                generated_at=self.clock.now(),
            )

            await self.cache.set(STATISTICS_CACHE_KEY, statistics.model_dump(mode="json"), self.ttl_seconds)
            return Return.ok(statistics)

        except Exception as e:
            logger.error(f"Failed to build overdue statistics: {e}")
            return Return.err(
                Error(
                    code="OVERDUE_STATISTICS_FAILED",
                    message="Failed to build overdue statistics",
                    reason=str(e),
                )
            )
