"""Explicit invoice transitions: send and cancel"""

import logging
from typing import Optional
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.clock import Clock
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.notifier import Notifier, EmailMessage
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.invoice_line_repository import InvoiceLineRepository
from receivables.app.repositories.payment_plan_repository import PaymentPlanRepository
from receivables.domain.errors import LedgerError, NotFoundError, InvalidOperationError
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.lifecycle import ensure_transition, recompute_status
from receivables.domain.payment_plan import InstallmentStatus, PaymentPlanStatus
from .dtos import InvoiceResponseDTO, SendInvoiceResponseDTO

logger = logging.getLogger(__name__)

_RESENDABLE = (InvoiceStatus.SENT, InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE)


async def email_invoice(
    notifier: Notifier,
    client_directory: ClientDirectory,
    invoice: Invoice,
    company_name: str,
) -> bool:
    """
    Email an invoice to its client

    Returns:
        True if the email was delivered
    """
    try:
        client = await client_directory.find_by_id(invoice.client_id)
        if not client or not client.email:
            logger.warning(f"No email on file for client {invoice.client_id}, invoice {invoice.invoice_number} not emailed")
            return False

        result = await notifier.send_email(
            EmailMessage(
                to=client.email,
                subject=f"New Invoice: {invoice.invoice_number}",
                body=(
                    f"Dear {client.name},\n\n"
                    f"Please find invoice #{invoice.invoice_number} for "
                    f"{invoice.total_amount} {invoice.currency}, due on {invoice.due_date.isoformat()}.\n\n"
                    f"Thank you for your business,\n{company_name}"
                ),
                template="invoice",
                template_data={
                    "client_name": client.name,
                    "invoice_number": invoice.invoice_number,
                    "total_amount": str(invoice.total_amount),
                    "due_date": invoice.due_date.isoformat(),
                },
            )
        )
        if not result.success:
            logger.warning(f"Invoice email for {invoice.invoice_number} failed: {result.error}")
        return result.success
    except Exception as e:
        logger.warning(f"Invoice email for {invoice.invoice_number} failed: {e}")
        return False


class SendInvoice:
    """
    Use Case: Send an invoice to its client

    Business Rules:
    1. draft and pending invoices move to sent (sent_at recorded)
    2. sent, partial and overdue invoices are re-sent without a status change
    3. paid and canceled invoices cannot be sent
    4. Email delivery is best-effort and reported as a flag
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        client_directory: ClientDirectory,
        notifier: Notifier,
        clock: Clock,
        company_name: str = "Receivables",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.client_directory = client_directory
        self.notifier = notifier
        self.clock = clock
        self.company_name = company_name

    async def execute(self, invoice_id: int) -> Result[SendInvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)

            if invoice.status not in _RESENDABLE:
                ensure_transition(invoice.status, InvoiceStatus.SENT)
                invoice.status = InvoiceStatus.SENT

            if invoice.sent_at is None:
                invoice.sent_at = self.clock.now()
            recompute_status(invoice, self.clock.today(), self.clock.now())
            invoice = await self.invoice_repo.update(invoice)
            lines = await self.line_repo.get_by_invoice_id(invoice.id)

            await self.uow.commit()
        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_INVOICE_FAILED",
                    message="Failed to send invoice",
                    reason=str(e),
                )
            )

        email_sent = await email_invoice(self.notifier, self.client_directory, invoice, self.company_name)
        logger.info(f"Sent invoice {invoice.invoice_number}, email_sent={email_sent}")

        return Return.ok(
            SendInvoiceResponseDTO(
                invoice=InvoiceResponseDTO.from_entity(invoice, lines),
                email_sent=email_sent,
                notification_failed=not email_sent,
            )
        )


class CancelInvoice:
    """
    Use Case: Cancel an invoice

    Business Rules:
    1. Only draft and pending invoices can be canceled
    2. An active payment plan on the invoice is canceled with it
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        plan_repo: Optional[PaymentPlanRepository] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.plan_repo = plan_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)
            if invoice.status == InvoiceStatus.CANCELED:
                raise InvalidOperationError(
                    "Invoice is already canceled",
                    reason=f"invoice {invoice.invoice_number} is canceled",
                )

            ensure_transition(invoice.status, InvoiceStatus.CANCELED)
            invoice.status = InvoiceStatus.CANCELED

            if self.plan_repo is not None:
                plan = await self.plan_repo.get_active_by_invoice_id(invoice.id)
                if plan:
                    for installment in await self.plan_repo.get_installments(plan.id):
                        if installment.status == InstallmentStatus.PENDING:
                            installment.status = InstallmentStatus.CANCELED
                            await self.plan_repo.update_installment(installment)
                    plan.status = PaymentPlanStatus.CANCELED
                    await self.plan_repo.update(plan)

            invoice = await self.invoice_repo.update(invoice)
            await self.uow.commit()

            logger.info(f"Canceled invoice {invoice.invoice_number}")
            return Return.ok(InvoiceResponseDTO.from_entity(invoice))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_INVOICE_FAILED",
                    message="Failed to cancel invoice",
                    reason=str(e),
                )
            )
