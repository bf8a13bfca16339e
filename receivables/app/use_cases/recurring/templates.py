"""Recurring Template Management Use Cases"""

import logging
from datetime import datetime
from typing import List, Optional
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.clock import Clock
from receivables.app.repositories.recurring_template_repository import RecurringTemplateRepository
from receivables.app.use_cases.line_items import parse_line_items, ParsedLineItem
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError, InvalidOperationError
from receivables.domain.recurring_template import (
    RecurringInvoiceTemplate,
    RecurringTemplateItem,
    RecurringStatus,
    Frequency,
)
from .dtos import (
    CreateRecurringTemplateCommandDTO,
    UpdateRecurringTemplateCommandDTO,
    RecurringQueryDTO,
    RecurringTemplateDTO,
    DeleteRecurringTemplateResultDTO,
)

logger = logging.getLogger(__name__)

FREQUENCY_NAMES = ", ".join(f.value for f in Frequency)


def parse_frequency(value: Optional[str], errors: List[str]) -> Optional[Frequency]:
    if not value:
        errors.append("frequency is required")
        return None
    try:
        return Frequency(value.lower())
    except ValueError:
        errors.append(f"frequency must be one of: {FREQUENCY_NAMES}")
        return None


def build_template_items(items: List[ParsedLineItem], template_id: int = 0) -> List[RecurringTemplateItem]:
    return [
        RecurringTemplateItem(
            template_id=template_id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            position=position,
        )
        for position, item in enumerate(items)
    ]


class CreateRecurringTemplate:
    """
    Use Case: Create a recurring invoice template

    Business Rules:
    1. Client must exist
    2. title, frequency and next_date are required
    3. interval >= 1, due_days >= 0
    4. end_date, when set, is not before next_date
    5. At least one valid line item
    6. Every violation is reported at once
    """

    def __init__(
        self,
        uow: UnitOfWork,
        template_repo: RecurringTemplateRepository,
        client_directory: ClientDirectory,
    ):
        self.uow = uow
        self.template_repo = template_repo
        self.client_directory = client_directory

    async def execute(self, command: CreateRecurringTemplateCommandDTO) -> Result[RecurringTemplateDTO]:
        try:
            errors: List[str] = []

            if command.client_id is None:
                errors.append("client_id is required")
            elif await self.client_directory.find_by_id(command.client_id) is None:
                errors.append(f"client_id: client {command.client_id} not found")

            if not (command.title or "").strip():
                errors.append("title is required")

            frequency = parse_frequency(command.frequency, errors)

            interval = 1 if command.interval is None else command.interval
            if interval < 1:
                errors.append("interval must be at least 1")

            due_days = 14 if command.due_days is None else command.due_days
            if due_days < 0:
                errors.append("due_days must be non-negative")

            if command.next_date is None:
                errors.append("next_date is required")
            elif command.end_date is not None and command.end_date < command.next_date:
                errors.append("end_date cannot be before next_date")

            parsed_items, item_errors = parse_line_items(command.items)
            errors.extend(item_errors)

            if errors:
                raise ValidationError(errors, message="Invalid recurring template")

            template = await self.template_repo.create(
                RecurringInvoiceTemplate(
                    client_id=command.client_id,
                    title=command.title.strip(),
                    description=command.description,
                    frequency=frequency,
                    interval=interval,
                    next_date=command.next_date,
                    anchor_day=command.next_date.day,
                    end_date=command.end_date,
                    due_days=due_days,
                    auto_send=command.auto_send,
                    status=RecurringStatus.ACTIVE,
                ),
                build_template_items(parsed_items),
            )
            items = await self.template_repo.get_items(template.id)
            await self.uow.commit()

            logger.info(
                f"Created recurring template {template.id} ({frequency.value} x{interval}) "
                f"for client {template.client_id}, first run {template.next_date}"
            )
            return Return.ok(RecurringTemplateDTO.from_entity(template, items))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_RECURRING_TEMPLATE_FAILED",
                    message="Failed to create recurring template",
                    reason=str(e),
                )
            )


class GetRecurringTemplate:
    def __init__(self, template_repo: RecurringTemplateRepository):
        self.template_repo = template_repo

    async def execute(self, template_id: int) -> Result[RecurringTemplateDTO]:
        template = await self.template_repo.get_by_id(template_id)
        if not template:
            return Return.err(NotFoundError("Recurring template", template_id).to_error())
        items = await self.template_repo.get_items(template_id)
        history = await self.template_repo.get_history(template_id)
        return Return.ok(RecurringTemplateDTO.from_entity(template, items, history))


class ListRecurringTemplates:
    def __init__(self, template_repo: RecurringTemplateRepository):
        self.template_repo = template_repo

    async def execute(self, query: RecurringQueryDTO) -> Result[list]:
        errors: List[str] = []
        status = None
        frequency = None
        if query.status:
            try:
                status = RecurringStatus(query.status)
            except ValueError:
                errors.append("status must be one of: " + ", ".join(s.value for s in RecurringStatus))
        if query.frequency:
            frequency = parse_frequency(query.frequency, errors)
        if errors:
            return Return.err(ValidationError(errors, message="Invalid filters").to_error())

        templates = await self.template_repo.list(
            client_id=query.client_id, status=status, frequency=frequency
        )
        return Return.ok([RecurringTemplateDTO.from_entity(t) for t in templates])


class UpdateRecurringTemplate:
    """
    Use Case: Update a recurring template

    Business Rules:
    1. Canceled and completed templates cannot be edited
    2. Same field rules as creation, checked against the merged values
    """

    def __init__(self, uow: UnitOfWork, template_repo: RecurringTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, template_id: int, command: UpdateRecurringTemplateCommandDTO) -> Result[RecurringTemplateDTO]:
        try:
            template = await self.template_repo.get_by_id(template_id, for_update=True)
            if not template:
                raise NotFoundError("Recurring template", template_id)
            if template.status != RecurringStatus.ACTIVE:
                raise InvalidOperationError(
                    f"Cannot modify a {template.status.value} recurring template",
                    reason="only active templates can be edited",
                )

            errors: List[str] = []
            if command.title is not None and not command.title.strip():
                errors.append("title cannot be empty")
            frequency = parse_frequency(command.frequency, errors) if command.frequency is not None else None
            if command.interval is not None and command.interval < 1:
                errors.append("interval must be at least 1")
            if command.due_days is not None and command.due_days < 0:
                errors.append("due_days must be non-negative")

            next_date = command.next_date or template.next_date
            end_date = None if command.clear_end_date else (command.end_date or template.end_date)
            if end_date is not None and end_date < next_date:
                errors.append("end_date cannot be before next_date")

            parsed_items = None
            if command.items is not None:
                parsed_items, item_errors = parse_line_items(command.items)
                errors.extend(item_errors)

            if errors:
                raise ValidationError(errors, message="Invalid recurring template")

            if command.title is not None:
                template.title = command.title.strip()
            if command.description is not None:
                template.description = command.description
            if frequency is not None:
                template.frequency = frequency
            if command.interval is not None:
                template.interval = command.interval
            if command.due_days is not None:
                template.due_days = command.due_days
            if command.auto_send is not None:
                template.auto_send = command.auto_send
            if command.next_date is not None:
                template.anchor_day = next_date.day
            template.next_date = next_date
            template.end_date = end_date
            template.updated_at = datetime.utcnow()

            template = await self.template_repo.update(template)
            if parsed_items is not None:
                items = await self.template_repo.replace_items(template.id, build_template_items(parsed_items))
            else:
                items = await self.template_repo.get_items(template.id)

            await self.uow.commit()
            return Return.ok(RecurringTemplateDTO.from_entity(template, items))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_RECURRING_TEMPLATE_FAILED",
                    message="Failed to update recurring template",
                    reason=str(e),
                )
            )


class DeleteRecurringTemplate:
    """
    Use Case: Delete a recurring template

    A template that already generated invoices keeps its history and
    must be canceled instead.
    """

    def __init__(self, uow: UnitOfWork, template_repo: RecurringTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, template_id: int) -> Result[DeleteRecurringTemplateResultDTO]:
        try:
            template = await self.template_repo.get_by_id(template_id, for_update=True)
            if not template:
                raise NotFoundError("Recurring template", template_id)

            generated = await self.template_repo.count_history(template_id)
            if generated > 0:
                raise InvalidOperationError(
                    "Cannot delete a recurring template that has generated invoices",
                    reason=f"{generated} invoices generated; cancel the template instead",
                )

            await self.template_repo.delete(template_id)
            await self.uow.commit()

            logger.info(f"Deleted recurring template {template_id}")
            return Return.ok(DeleteRecurringTemplateResultDTO(template_id=template_id))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_RECURRING_TEMPLATE_FAILED",
                    message="Failed to delete recurring template",
                    reason=str(e),
                )
            )


class CancelRecurringTemplate:
    def __init__(self, uow: UnitOfWork, template_repo: RecurringTemplateRepository):
        self.uow = uow
        self.template_repo = template_repo

    async def execute(self, template_id: int) -> Result[RecurringTemplateDTO]:
        try:
            template = await self.template_repo.get_by_id(template_id, for_update=True)
            if not template:
                raise NotFoundError("Recurring template", template_id)
            if template.status == RecurringStatus.CANCELED:
                raise InvalidOperationError(
                    "Recurring template is already canceled",
                    reason=f"template {template_id} is canceled",
                )

            template.status = RecurringStatus.CANCELED
            template.updated_at = datetime.utcnow()
            template = await self.template_repo.update(template)
            await self.uow.commit()

            logger.info(f"Canceled recurring template {template_id}")
            return Return.ok(RecurringTemplateDTO.from_entity(template))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_RECURRING_TEMPLATE_FAILED",
                    message="Failed to cancel recurring template",
                    reason=str(e),
                )
            )


class ReactivateRecurringTemplate:
    """
    Use Case: Reactivate a canceled or completed template

    Business Rules:
    1. Active templates cannot be reactivated
    2. A template whose end_date has passed stays inactive
    3. A next_date in the past moves to today so missed periods are
       not generated in bulk
    """

    def __init__(self, uow: UnitOfWork, template_repo: RecurringTemplateRepository, clock: Clock):
        self.uow = uow
        self.template_repo = template_repo
        self.clock = clock

    async def execute(self, template_id: int) -> Result[RecurringTemplateDTO]:
        try:
            template = await self.template_repo.get_by_id(template_id, for_update=True)
            if not template:
                raise NotFoundError("Recurring template", template_id)
            if template.status == RecurringStatus.ACTIVE:
                raise InvalidOperationError(
                    "Recurring template is already active",
                    reason=f"template {template_id} is active",
                )

            today = self.clock.today()
            if template.end_date is not None and template.end_date < today:
                raise InvalidOperationError(
                    "Cannot reactivate a recurring template past its end date",
                    reason=f"end_date {template.end_date.isoformat()} has passed",
                )

            if template.next_date < today:
                template.next_date = today
                template.anchor_day = today.day
            template.status = RecurringStatus.ACTIVE
            template.updated_at = datetime.utcnow()
            template = await self.template_repo.update(template)
            await self.uow.commit()

            logger.info(f"Reactivated recurring template {template_id}, next run {template.next_date}")
            return Return.ok(RecurringTemplateDTO.from_entity(template))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REACTIVATE_RECURRING_TEMPLATE_FAILED",
                    message="Failed to reactivate recurring template",
                    reason=str(e),
                )
            )
