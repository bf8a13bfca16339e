"""Payment query use cases"""

from decimal import Decimal
from receivables.libs.result import Result, Return
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.app.repositories.payment_method_repository import PaymentMethodRepository
from receivables.domain.base import to_money
from receivables.domain.errors import NotFoundError
from .dtos import (
    PaymentResponseDTO,
    PaymentStatisticsQueryDTO,
    PaymentStatisticsDTO,
    MethodStatisticsDTO,
)


class ListPayments:
    """
    List Payments Use Case

    Payments of one invoice, newest first. An invoice without payments
    yields an empty list.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        method_repo: PaymentMethodRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.method_repo = method_repo

    async def execute(self, invoice_id: int) -> Result[list]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(NotFoundError("Invoice", invoice_id).to_error())

        payments = await self.payment_repo.get_by_invoice_id(invoice_id)
        methods = {m.id: m for m in await self.method_repo.list()}
        return Return.ok(
            [PaymentResponseDTO.from_entity(p, methods.get(p.payment_method_id)) for p in payments]
        )


class GetPaymentStatistics:
    """
    Get Payment Statistics Use Case

    Totals and per-method breakdown over an optional date range.
    """

    def __init__(self, payment_repo: PaymentRepository, method_repo: PaymentMethodRepository):
        self.payment_repo = payment_repo
        self.method_repo = method_repo

    async def execute(self, query: PaymentStatisticsQueryDTO) -> Result[PaymentStatisticsDTO]:
        totals = await self.payment_repo.totals_by_method(query.start_date, query.end_date)
        methods = {m.id: m for m in await self.method_repo.list()}

        by_method = []
        total_count = 0
        total_amount = Decimal("0.00")
        for row in totals:
            method = methods.get(row.payment_method_id)
            by_method.append(
                MethodStatisticsDTO(
                    payment_method_id=row.payment_method_id,
                    payment_method_name=method.name if method else "Unspecified",
                    count=row.count,
                    total_amount=to_money(row.total_amount),
                )
            )
            total_count += row.count
            total_amount += Decimal(row.total_amount)

        average = to_money(total_amount / total_count) if total_count else Decimal("0.00")
        by_method.sort(key=lambda m: m.total_amount, reverse=True)

        return Return.ok(
            PaymentStatisticsDTO(
                start_date=query.start_date,
                end_date=query.end_date,
                total_payments=total_count,
                total_amount=to_money(total_amount),
                average_amount=average,
                by_method=by_method,
            )
        )
