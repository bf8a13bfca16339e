"""Overdue API Routes

FastAPI routes for overdue reporting, reminders, late fees and the
escalation configuration.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from receivables.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from receivables.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from receivables.adapter.repositories.overdue_config_repository import SqlAlchemyOverdueConfigRepository
from receivables.adapter.repositories.reminder_template_repository import SqlAlchemyReminderTemplateRepository
from receivables.adapter.repositories.reminder_log_repository import SqlAlchemyReminderLogRepository
from receivables.adapter.services.client_directory import SqlClientDirectory
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.cache import Cache
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier
from receivables.app.use_cases.overdue import (
    ReminderSender,
    LateFeeApplier,
    SendReminder,
    ApplyLateFee,
    ProcessOverdueInvoices,
    GetOverdueInvoices,
    GetOverdueStatistics,
    GetOverdueConfig,
    UpdateOverdueConfig,
    ListReminderTemplates,
    CreateReminderTemplate,
    UpdateReminderTemplate,
    DeleteReminderTemplate,
    ListReminderLogs,
    OverdueQueryDTO,
    SendReminderCommandDTO,
    ApplyLateFeeCommandDTO,
    UpdateOverdueConfigCommandDTO,
    CreateReminderTemplateCommandDTO,
    UpdateReminderTemplateCommandDTO,
)
from receivables.depends import get_session, get_cache, get_clock, get_notifier
from receivables.api.error import ClientError
from receivables.api.response import ok

router = APIRouter(prefix="/overdue", tags=["Overdue"])


def _sender(session: AsyncSession, notifier: Notifier, clock: Clock) -> ReminderSender:
    return ReminderSender(
        SqlAlchemyReminderTemplateRepository(session),
        SqlAlchemyReminderLogRepository(session),
        SqlClientDirectory(session),
        notifier,
        clock,
        company_name=ApplicationConfig.COMPANY_NAME,
    )


def _applier(session: AsyncSession, clock: Clock) -> LateFeeApplier:
    return LateFeeApplier(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        clock,
    )


@router.get("")
async def list_overdue_invoices(
    client_id: Optional[int] = Query(default=None),
    client_name: Optional[str] = Query(default=None, min_length=1),
    min_days_overdue: Optional[int] = Query(default=None, ge=0),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Past-due invoices with days overdue and aging bucket, oldest first"""
    use_case = GetOverdueInvoices(SqlAlchemyInvoiceRepository(session), SqlClientDirectory(session), clock)
    query = OverdueQueryDTO(client_id=client_id, client_name=client_name, min_days_overdue=min_days_overdue)
    result = await use_case.execute(query)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.get("/statistics")
async def get_overdue_statistics(
    refresh: bool = Query(default=False, description="Bypass the cached statistics"),
    session: AsyncSession = Depends(get_session),
    cache: Cache = Depends(get_cache),
    clock: Clock = Depends(get_clock),
):
    """Overdue count, amount, average age and aging buckets"""
    use_case = GetOverdueStatistics(
        SqlAlchemyInvoiceRepository(session),
        cache,
        clock,
        ttl_seconds=ApplicationConfig.CACHE_TTL_SECONDS,
    )
    result = await use_case.execute(refresh=refresh)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/process")
async def process_overdue_invoices(
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    cache: Cache = Depends(get_cache),
    clock: Clock = Depends(get_clock),
):
    """
    Run the overdue sweep now.

    Marks past-due invoices overdue, sends due reminders and applies
    automatic late fees. A failing invoice is reported in `errors` and does
    not stop the run.
    """
    use_case = ProcessOverdueInvoices(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyOverdueConfigRepository(session),
        SqlAlchemyReminderLogRepository(session),
        _sender(session, notifier, clock),
        _applier(session, clock),
        clock,
        cache=cache,
    )
    result = await use_case.execute()

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Configuration

@router.get("/config")
async def get_overdue_config(session: AsyncSession = Depends(get_session)):
    use_case = GetOverdueConfig(SqlAlchemyUnitOfWork(session), SqlAlchemyOverdueConfigRepository(session))
    result = await use_case.execute()

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.put("/config")
async def update_overdue_config(
    command: UpdateOverdueConfigCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateOverdueConfig(SqlAlchemyUnitOfWork(session), SqlAlchemyOverdueConfigRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Reminder templates

@router.get("/templates")
async def list_reminder_templates(
    tier: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    result = await ListReminderTemplates(SqlAlchemyReminderTemplateRepository(session)).execute(tier)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/templates", status_code=status.HTTP_201_CREATED)
async def create_reminder_template(
    command: CreateReminderTemplateCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = CreateReminderTemplate(SqlAlchemyUnitOfWork(session), SqlAlchemyReminderTemplateRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.patch("/templates/{template_id}")
async def update_reminder_template(
    template_id: int,
    command: UpdateReminderTemplateCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateReminderTemplate(SqlAlchemyUnitOfWork(session), SqlAlchemyReminderTemplateRepository(session))
    result = await use_case.execute(template_id, command)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.delete("/templates/{template_id}")
async def delete_reminder_template(template_id: int, session: AsyncSession = Depends(get_session)):
    use_case = DeleteReminderTemplate(SqlAlchemyUnitOfWork(session), SqlAlchemyReminderTemplateRepository(session))
    result = await use_case.execute(template_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


# Per invoice

@router.get("/{invoice_id}/reminders")
async def list_invoice_reminders(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Reminder attempts for an invoice, newest first"""
    use_case = ListReminderLogs(SqlAlchemyInvoiceRepository(session), SqlAlchemyReminderLogRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{invoice_id}/reminder")
async def send_invoice_reminder(
    invoice_id: int,
    command: Optional[SendReminderCommandDTO] = None,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Send a reminder for one invoice now.

    The tier defaults to the one after the last reminder sent. Every
    attempt is logged, including failed deliveries.
    """
    use_case = SendReminder(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyOverdueConfigRepository(session),
        SqlAlchemyReminderTemplateRepository(session),
        SqlAlchemyReminderLogRepository(session),
        _sender(session, notifier, clock),
    )
    result = await use_case.execute(invoice_id, command or SendReminderCommandDTO())

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)


@router.post("/{invoice_id}/late-fee")
async def apply_late_fee(
    invoice_id: int,
    command: Optional[ApplyLateFeeCommandDTO] = None,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Add a late-fee line to an invoice.

    Without an explicit amount the configured fee is used; the invoice
    total grows by the fee.
    """
    use_case = ApplyLateFee(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyOverdueConfigRepository(session),
        _applier(session, clock),
    )
    result = await use_case.execute(invoice_id, command or ApplyLateFeeCommandDTO())

    if result.is_err():
        raise ClientError(result.error)
    return ok(result.value)
