"""Overdue configuration, reminder templates and reminder history"""

import logging
from datetime import datetime
from typing import List, Optional
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.overdue_config_repository import OverdueConfigRepository
from receivables.app.repositories.reminder_log_repository import ReminderLogRepository
from receivables.app.repositories.reminder_template_repository import ReminderTemplateRepository
from receivables.domain.base import to_money
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError
from receivables.domain.lifecycle import parse_decimal
from receivables.domain.overdue import LateFeeType, ReminderTemplate
from .escalation import parse_fee_type, parse_tier
from .dtos import (
    OverdueConfigDTO,
    UpdateOverdueConfigCommandDTO,
    CreateReminderTemplateCommandDTO,
    UpdateReminderTemplateCommandDTO,
    ReminderTemplateDTO,
    ReminderLogDTO,
)

logger = logging.getLogger(__name__)


class GetOverdueConfig:
    def __init__(self, uow: UnitOfWork, config_repo: OverdueConfigRepository):
        self.uow = uow
        self.config_repo = config_repo

    async def execute(self) -> Result[OverdueConfigDTO]:
        try:
            config = await self.config_repo.get()
            await self.uow.commit()
            return Return.ok(OverdueConfigDTO.from_entity(config))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="GET_OVERDUE_CONFIG_FAILED",
                    message="Failed to load overdue configuration",
                    reason=str(e),
                )
            )


class UpdateOverdueConfig:
    """
    Use Case: Update overdue escalation settings

    Business Rules:
    1. grace_period_days >= 0, max_reminders >= 0
    2. reminder_frequency_days >= 1, late_fee_window_days >= 1
    3. late_fee_amount >= 0; at most 100 when the fee is a percentage;
       above 0 while auto_late_fee is on
    4. Every violation is reported at once
    """

    def __init__(self, uow: UnitOfWork, config_repo: OverdueConfigRepository):
        self.uow = uow
        self.config_repo = config_repo

    async def execute(self, command: UpdateOverdueConfigCommandDTO) -> Result[OverdueConfigDTO]:
        try:
            config = await self.config_repo.get()
            errors: List[str] = []

            for field, minimum in (
                ("grace_period_days", 0),
                ("max_reminders", 0),
                ("reminder_frequency_days", 1),
                ("late_fee_window_days", 1),
            ):
                value = getattr(command, field)
                if value is not None and value < minimum:
                    errors.append(f"{field} must be at least {minimum}")

            fee_type = parse_fee_type(command.late_fee_type, errors, field="late_fee_type")
            fee_amount = None
            if command.late_fee_amount is not None:
                try:
                    fee_amount = parse_decimal(command.late_fee_amount)
                    if fee_amount < 0:
                        errors.append("late_fee_amount must be non-negative")
                except ValueError:
                    errors.append("late_fee_amount must be a number")

            effective_type = fee_type or LateFeeType(config.late_fee_type)
            effective_amount = fee_amount if fee_amount is not None else config.late_fee_amount
            if effective_type == LateFeeType.PERCENTAGE and effective_amount is not None and effective_amount > 100:
                errors.append("late_fee_amount cannot exceed 100 for percentage fees")
            effective_auto = command.auto_late_fee if command.auto_late_fee is not None else config.auto_late_fee
            if effective_auto and effective_amount is not None and effective_amount <= 0:
                errors.append("late_fee_amount must be greater than 0 when auto_late_fee is enabled")

            if errors:
                raise ValidationError(errors, message="Invalid overdue configuration")

            for field in ("grace_period_days", "max_reminders", "reminder_frequency_days",
                          "late_fee_window_days", "auto_late_fee"):
                value = getattr(command, field)
                if value is not None:
                    setattr(config, field, value)
            if fee_type is not None:
                config.late_fee_type = fee_type
            if fee_amount is not None:
                config.late_fee_amount = to_money(fee_amount)
            config.updated_at = datetime.utcnow()

            config = await self.config_repo.update(config)
            await self.uow.commit()

            logger.info(
                f"Overdue config updated: grace={config.grace_period_days}, "
                f"frequency={config.reminder_frequency_days}, max={config.max_reminders}, "
                f"auto_late_fee={config.auto_late_fee}"
            )
            return Return.ok(OverdueConfigDTO.from_entity(config))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_OVERDUE_CONFIG_FAILED",
                    message="Failed to update overdue configuration",
                    reason=str(e),
                )
            )


class ListReminderTemplates:
    def __init__(self, template_repo: ReminderTemplateRepository):
        self.template_repo = template_repo

    async def execute(self, tier: Optional[str] = None) -> Result[List[ReminderTemplateDTO]]:
        errors: List[str] = []
        parsed_tier = parse_tier(tier, errors)
        if errors:
            return Return.err(ValidationError(errors, message="Invalid filters").to_error())
        templates = await self.template_repo.list(tier=parsed_tier)
        return Return.ok([ReminderTemplateDTO.from_entity(t) for t in templates])


class CreateReminderTemplate:
    """
    Use Case: Create a reminder template

    name, subject, body and tier are required. A new default replaces
    the previous default of its tier.
    """

    def __init__(self, uow: UnitOfWork, template_repo: ReminderTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, command: CreateReminderTemplateCommandDTO) -> Result[ReminderTemplateDTO]:
        try:
            errors: List[str] = []
            for field in ("name", "subject", "body"):
                if not (getattr(command, field) or "").strip():
                    errors.append(f"{field} is required")
            if command.tier is None:
                errors.append("tier is required")
            tier = parse_tier(command.tier, errors)
            if errors:
                raise ValidationError(errors, message="Invalid reminder template")

            template = await self.template_repo.create(
                ReminderTemplate(
                    name=command.name.strip(),
                    subject=command.subject.strip(),
                    body=command.body,
                    tier=tier,
                    is_default=command.is_default,
                )
            )
            if template.is_default:
                await self.template_repo.clear_default(tier, except_id=template.id)
            await self.uow.commit()
            return Return.ok(ReminderTemplateDTO.from_entity(template))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_REMINDER_TEMPLATE_FAILED",
                    message="Failed to create reminder template",
                    reason=str(e),
                )
            )


class UpdateReminderTemplate:
    def __init__(self, uow: UnitOfWork, template_repo: ReminderTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, template_id: int, command: UpdateReminderTemplateCommandDTO) -> Result[ReminderTemplateDTO]:
        try:
            template = await self.template_repo.get_by_id(template_id)
            if not template:
                raise NotFoundError("Reminder template", template_id)

            errors: List[str] = []
            for field in ("name", "subject", "body"):
                value = getattr(command, field)
                if value is not None and not value.strip():
                    errors.append(f"{field} cannot be empty")
            tier = parse_tier(command.tier, errors)
            if errors:
                raise ValidationError(errors, message="Invalid reminder template")

            if command.name is not None:
                template.name = command.name.strip()
            if command.subject is not None:
                template.subject = command.subject.strip()
            if command.body is not None:
                template.body = command.body
            if tier is not None:
                template.tier = tier
            if command.is_default is not None:
                template.is_default = command.is_default
            template.updated_at = datetime.utcnow()

            template = await self.template_repo.update(template)
            if template.is_default:
                await self.template_repo.clear_default(template.tier, except_id=template.id)
            await self.uow.commit()
            return Return.ok(ReminderTemplateDTO.from_entity(template))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_REMINDER_TEMPLATE_FAILED",
                    message="Failed to update reminder template",
                    reason=str(e),
                )
            )


class DeleteReminderTemplate:
    """Reminder logs keep the template id after the template is gone"""

    def __init__(self, uow: UnitOfWork, template_repo: ReminderTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, template_id: int) -> Result[dict]:
        try:
            template = await self.template_repo.get_by_id(template_id)
            if not template:
                raise NotFoundError("Reminder template", template_id)
            await self.template_repo.delete(template_id)
            await self.uow.commit()
            return Return.ok({"template_id": template_id, "deleted": True})

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_REMINDER_TEMPLATE_FAILED",
                    message="Failed to delete reminder template",
                    reason=str(e),
                )
            )


class ListReminderLogs:
    def __init__(self, invoice_repo: InvoiceRepository, log_repo: ReminderLogRepository):
        self.invoice_repo = invoice_repo
        self.log_repo = log_repo

    async def execute(self, invoice_id: int) -> Result[List[ReminderLogDTO]]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(NotFoundError("Invoice", invoice_id).to_error())
        logs = await self.log_repo.get_by_invoice_id(invoice_id)
        return Return.ok([ReminderLogDTO.from_entity(log) for log in logs])
