"""Recurring Invoice API Routes

FastAPI routes for recurring templates and on-demand invoice generation.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.recurring_template_repository import SqlAlchemyRecurringTemplateRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier
from receivables.app.use_cases.recurring import (
    CreateRecurringTemplate,
    GetRecurringTemplate,
    ListRecurringTemplates,
    UpdateRecurringTemplate,
    DeleteRecurringTemplate,
    CancelRecurringTemplate,
    ReactivateRecurringTemplate,
    GenerateRecurringInvoice,
    ProcessDueRecurringInvoices,
    CreateRecurringTemplateCommandDTO,
    UpdateRecurringTemplateCommandDTO,
    RecurringQueryDTO,
)
from receivables.depends import get_session, get_clock, get_notifier
from receivables.api.error import ClientError
from receivables.api.response import ok

router = APIRouter(prefix="/recurring", tags=["Recurring"])


def _generator(session: AsyncSession, notifier: Notifier, clock: Clock) -> GenerateRecurringInvoice:
    return GenerateRecurringInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlClientDirectory(session),
        notifier,
        clock,
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
        company_name=ApplicationConfig.COMPANY_NAME,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recurring_template(
    command: CreateRecurringTemplateCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """
    Create a recurring invoice template.

    `next_date` starts at `start_date`; the scheduler generates an invoice
    whenever `next_date` is today or earlier.
    """
    use_case = CreateRecurringTemplate(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
        SqlClientDirectory(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("")
async def list_recurring_templates(
    client_id: Optional[int] = Query(default=None),
    template_status: Optional[str] = Query(default=None, alias="status"),
    frequency: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    query = RecurringQueryDTO(client_id=client_id, status=template_status, frequency=frequency)
    result = await ListRecurringTemplates(SqlAlchemyRecurringTemplateRepository(session)).execute(query)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/process-due")
async def process_due_templates(
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Generate invoices for every active template that is due.

    Safe to call repeatedly: a template generates at most once per day.
    """
    use_case = ProcessDueRecurringInvoices(
        SqlAlchemyRecurringTemplateRepository(session),
        _generator(session, notifier, clock),
        clock,
    )
    result = await use_case.execute()

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/{template_id}")
async def get_recurring_template(template_id: int, session: AsyncSession = Depends(get_session)):
    """Template with its items and generation history"""
    result = await GetRecurringTemplate(SqlAlchemyRecurringTemplateRepository(session)).execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.patch("/{template_id}")
async def update_recurring_template(
    template_id: int,
    command: UpdateRecurringTemplateCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateRecurringTemplate(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
    )
    result = await use_case.execute(template_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.delete("/{template_id}")
async def delete_recurring_template(template_id: int, session: AsyncSession = Depends(get_session)):
    """Delete a template that has never generated an invoice"""
    use_case = DeleteRecurringTemplate(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
    )
    result = await use_case.execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{template_id}/cancel")
async def cancel_recurring_template(template_id: int, session: AsyncSession = Depends(get_session)):
    use_case = CancelRecurringTemplate(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
    )
    result = await use_case.execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{template_id}/reactivate")
async def reactivate_recurring_template(
    template_id: int,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    use_case = ReactivateRecurringTemplate(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRecurringTemplateRepository(session),
        clock,
    )
    result = await use_case.execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{template_id}/generate")
async def generate_recurring_invoice(
    template_id: int,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """Generate the next invoice for a template now, regardless of next_date"""
    result = await _generator(session, notifier, clock).execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)
