"""Invoice API Routes

FastAPI routes for the invoice lifecycle: CRUD, transitions, PDF and summary.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from receivables.adapter.repositories.payment_method_repository import SqlAlchemyPaymentMethodRepository
from receivables.adapter.repositories.payment_plan_repository import SqlAlchemyPaymentPlanRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.pdf_service import ReportLabPdfService
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.cache import Cache
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier
from receivables.app.use_cases.invoices import (
    CreateInvoice,
    GetInvoice,
    ListInvoices,
    UpdateInvoice,
    DeleteInvoice,
    SendInvoice,
    CancelInvoice,
    MarkInvoicePaid,
    GenerateInvoicePdf,
    GetInvoiceSummary,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    ListInvoicesQueryDTO,
    MarkInvoicePaidCommandDTO,
)
from receivables.app.use_cases.payments import PaymentLedger, PaymentReceipts
from receivables.depends import get_session, get_cache, get_clock, get_notifier
from receivables.domain.invoice import InvoiceStatus
from receivables.api.error import ClientError
from receivables.api.response import ok

router = APIRouter(prefix="/invoices", tags=["Invoices"])

_ERROR_EXAMPLE = {
    "application/json": {
        "example": {
            "success": False,
            "error": {
                "code": "NOT_FOUND",
                "message": "Invoice with ID 123 not found",
                "reason": "Invoice does not exist",
                "details": []
            }
        }
    }
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"description": "Invalid invoice data"},
    }
)
async def create_invoice(
    command: CreateInvoiceCommandDTO,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Create an invoice with its line items.

    Totals are computed from the items. The invoice starts as `pending`
    unless `draft` is requested; the number is generated when omitted.

    **Returns:**
    - 201: Invoice created
    - 422: Every invalid field is listed in `error.details`
    """
    use_case = CreateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlClientDirectory(session),
        clock,
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("")
async def list_invoices(
    client_id: Optional[int] = Query(default=None),
    invoice_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    created_from: Optional[date] = Query(default=None),
    created_to: Optional[date] = Query(default=None),
    due_from: Optional[date] = Query(default=None),
    due_to: Optional[date] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """List invoices, newest first, with optional filters"""
    query = ListInvoicesQueryDTO(
        client_id=client_id,
        status=invoice_status,
        created_from=created_from,
        created_to=created_to,
        due_from=due_from,
        due_to=due_to,
        limit=limit,
        offset=offset,
    )
    result = await ListInvoices(SqlAlchemyInvoiceRepository(session)).execute(query)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/summary")
async def get_invoice_summary(
    refresh: bool = Query(default=False, description="Bypass the cached summary"),
    session: AsyncSession = Depends(get_session),
    cache: Cache = Depends(get_cache),
    clock: Clock = Depends(get_clock),
):
    """
    Receivables summary by status.

    Cached for `CACHE_TTL_SECONDS`; pass `refresh=true` to recompute.
    """
    use_case = GetInvoiceSummary(
        SqlAlchemyInvoiceRepository(session),
        cache,
        clock,
        ttl_seconds=ApplicationConfig.CACHE_TTL_SECONDS,
    )
    result = await use_case.execute(refresh=refresh)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get(
    "/{invoice_id}",
    responses={404: {"description": "Invoice not found", "content": _ERROR_EXAMPLE}}
)
async def get_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Fetch one invoice with its line items"""
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.patch(
    "/{invoice_id}",
    responses={
        404: {"description": "Invoice not found", "content": _ERROR_EXAMPLE},
        409: {"description": "Invoice is not editable or the transition is not allowed"},
        422: {"description": "Invalid invoice data"},
    }
)
async def update_invoice(
    invoice_id: int,
    command: UpdateInvoiceCommandDTO,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Update an invoice.

    Only supplied fields change. Paid and canceled invoices are immutable;
    a `status` field is validated against the lifecycle.
    """
    use_case = UpdateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        clock,
    )
    result = await use_case.execute(invoice_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.delete(
    "/{invoice_id}",
    responses={
        404: {"description": "Invoice not found", "content": _ERROR_EXAMPLE},
        409: {"description": "Only pending invoices can be deleted"},
    }
)
async def delete_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Delete a pending invoice together with its lines, payments and plans"""
    use_case = DeleteInvoice(SqlAlchemyUnitOfWork(session), SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{invoice_id}/send")
async def send_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Mark an invoice as sent and email it to the client.

    The transition is committed even when the email fails;
    `email_sent` and `notification_failed` report the delivery outcome.
    """
    use_case = SendInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlClientDirectory(session),
        notifier,
        clock,
        company_name=ApplicationConfig.COMPANY_NAME,
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{invoice_id}/mark-paid")
async def mark_invoice_paid(
    invoice_id: int,
    command: Optional[MarkInvoicePaidCommandDTO] = None,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """Settle the remaining balance with a single payment"""
    ledger = PaymentLedger(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyPaymentMethodRepository(session),
        clock,
    )
    receipts = PaymentReceipts(notifier, SqlClientDirectory(session), ApplicationConfig.COMPANY_NAME)
    use_case = MarkInvoicePaid(SqlAlchemyUnitOfWork(session), ledger, receipts)
    result = await use_case.execute(invoice_id, command or MarkInvoicePaidCommandDTO())

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{invoice_id}/cancel")
async def cancel_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Cancel an unpaid invoice; active payment plans are canceled with it"""
    use_case = CancelInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentPlanRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get(
    "/{invoice_id}/pdf",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "PDF document"
        },
        404: {"description": "Invoice not found", "content": _ERROR_EXAMPLE},
    }
)
async def download_invoice_pdf(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Download the invoice as a PDF file"""
    use_case = GenerateInvoicePdf(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
        SqlClientDirectory(session),
        ReportLabPdfService(),
        company_name=ApplicationConfig.COMPANY_NAME,
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    pdf = result.value
    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf.filename}"'},
    )
