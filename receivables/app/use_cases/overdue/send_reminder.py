"""SendReminder Use Case"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.overdue_config_repository import OverdueConfigRepository
from receivables.app.repositories.reminder_log_repository import ReminderLogRepository
from receivables.app.repositories.reminder_template_repository import ReminderTemplateRepository
from receivables.domain.errors import LedgerError, NotFoundError, InvalidOperationError, ValidationError
from receivables.domain.invoice import COLLECTIBLE_STATUSES
from receivables.domain.overdue import ReminderTier
from .escalation import ReminderSender, parse_tier
from .dtos import SendReminderCommandDTO, ReminderResultDTO

logger = logging.getLogger(__name__)


class SendReminder:
    """
    Use Case: Send a payment reminder for one invoice

    Business Rules:
    1. Invoice must be sent, partial or overdue with a balance left
    2. Tier: explicit, else the template's, else one above the last
       reminder (gentle for the first)
    3. A failed delivery is still logged and reported as success=False
    4. The invoice is read without a lock; reminders never change it
    5. In-app notification after commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        config_repo: OverdueConfigRepository,
        template_repo: ReminderTemplateRepository,
        log_repo: ReminderLogRepository,
        sender: ReminderSender,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.config_repo = config_repo
        self.template_repo = template_repo
        self.log_repo = log_repo
        self.sender = sender

    async def execute(self, invoice_id: int, command: SendReminderCommandDTO) -> Result[ReminderResultDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)
            if invoice.status not in COLLECTIBLE_STATUSES or invoice.remaining_balance <= 0:
                raise InvalidOperationError(
                    f"Cannot send a reminder for a {invoice.status.value} invoice",
                    reason=f"invoice {invoice.invoice_number} has nothing to collect",
                )

            errors = []
            tier = parse_tier(command.tier, errors)
            template = None
            if command.template_id is not None:
                template = await self.template_repo.get_by_id(command.template_id)
                if not template:
                    errors.append(f"template_id: reminder template {command.template_id} not found")
            if errors:
                raise ValidationError(errors, message="Invalid reminder request")

            if tier is None and template is not None:
                tier = template.tier
            if tier is None:
                logs = await self.log_repo.get_by_invoice_id(invoice.id)
                tier = ReminderTier(logs[0].tier).next() if logs else ReminderTier.GENTLE

            config = await self.config_repo.get()
            log = await self.sender.send(invoice, tier, config, template=template)
            await self.uow.commit()

            await self.sender.notify(invoice, log)

            return Return.ok(
                ReminderResultDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    tier=tier.value,
                    template_id=log.template_id,
                    success=log.success,
                    error_message=log.error_message,
                    log_id=log.id,
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to send reminder for invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="SEND_REMINDER_FAILED",
                    message="Failed to send reminder",
                    reason=str(e),
                )
            )
