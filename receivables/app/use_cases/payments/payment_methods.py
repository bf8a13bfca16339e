"""Payment Method Registry Use Cases"""

import logging
from datetime import datetime
from receivables.libs.result import Result, Return, Error
from receivables.app.services.unit_of_work import UnitOfWork
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.app.repositories.payment_method_repository import PaymentMethodRepository
from receivables.domain.errors import LedgerError, NotFoundError, ValidationError
from receivables.domain.payment_method import PaymentMethod
from .dtos import (
    CreatePaymentMethodCommandDTO,
    UpdatePaymentMethodCommandDTO,
    PaymentMethodDTO,
    DeletePaymentMethodResultDTO,
)

logger = logging.getLogger(__name__)


class ListPaymentMethods:
    def __init__(self, method_repo: PaymentMethodRepository):
        self.method_repo = method_repo

    async def execute(self, active_only: bool = False) -> Result[list]:
        methods = await self.method_repo.list(active_only=active_only)
        return Return.ok([PaymentMethodDTO.from_entity(m) for m in methods])


class CreatePaymentMethod:
    """
    Use Case: Register a payment method

    Business Rules:
    1. name is required and unique (case-sensitive)
    """

    def __init__(self, uow: UnitOfWork, method_repo: PaymentMethodRepository):
        self.uow = uow
        self.method_repo = method_repo

    async def execute(self, command: CreatePaymentMethodCommandDTO) -> Result[PaymentMethodDTO]:
        try:
            name = command.name.strip()
            if not name:
                raise ValidationError(["name is required"], message="Invalid payment method")
            if await self.method_repo.get_by_name(name):
                raise ValidationError(
                    [f"name: payment method {name} already exists"],
                    message="Invalid payment method",
                )

            method = await self.method_repo.create(
                PaymentMethod(
                    name=name,
                    description=command.description,
                    requires_confirmation=command.requires_confirmation,
                    is_active=command.is_active,
                )
            )
            await self.uow.commit()

            logger.info(f"Created payment method {method.name}")
            return Return.ok(PaymentMethodDTO.from_entity(method))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_PAYMENT_METHOD_FAILED",
                    message="Failed to create payment method",
                    reason=str(e),
                )
            )


class UpdatePaymentMethod:
    def __init__(self, uow: UnitOfWork, method_repo: PaymentMethodRepository):
        self.uow = uow
        self.method_repo = method_repo

    async def execute(self, method_id: int, command: UpdatePaymentMethodCommandDTO) -> Result[PaymentMethodDTO]:
        try:
            method = await self.method_repo.get_by_id(method_id)
            if not method:
                raise NotFoundError("Payment method", method_id)

            if command.name is not None:
                name = command.name.strip()
                if not name:
                    raise ValidationError(["name cannot be empty"], message="Invalid payment method")
                existing = await self.method_repo.get_by_name(name)
                if existing and existing.id != method.id:
                    raise ValidationError(
                        [f"name: payment method {name} already exists"],
                        message="Invalid payment method",
                    )
                method.name = name
            if command.description is not None:
                method.description = command.description
            if command.requires_confirmation is not None:
                method.requires_confirmation = command.requires_confirmation
            if command.is_active is not None:
                method.is_active = command.is_active
            method.updated_at = datetime.utcnow()

            method = await self.method_repo.update(method)
            await self.uow.commit()
            return Return.ok(PaymentMethodDTO.from_entity(method))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_PAYMENT_METHOD_FAILED",
                    message="Failed to update payment method",
                    reason=str(e),
                )
            )


class DeletePaymentMethod:
    """
    Use Case: Remove a payment method

    Business Rules:
    1. A method referenced by payments is deactivated instead of deleted
    """

    def __init__(
        self,
        uow: UnitOfWork,
        method_repo: PaymentMethodRepository,
        payment_repo: PaymentRepository,
    ):
        self.uow = uow
        self.method_repo = method_repo
        self.payment_repo = payment_repo

    async def execute(self, method_id: int) -> Result[DeletePaymentMethodResultDTO]:
        try:
            method = await self.method_repo.get_by_id(method_id)
            if not method:
                raise NotFoundError("Payment method", method_id)

            in_use = await self.payment_repo.count_by_method(method_id)
            if in_use > 0:
                method.is_active = False
                method.updated_at = datetime.utcnow()
                await self.method_repo.update(method)
                await self.uow.commit()
                logger.info(f"Payment method {method.name} is used by {in_use} payments, deactivated")
                return Return.ok(
                    DeletePaymentMethodResultDTO(method_id=method_id, deleted=False, deactivated=True)
                )

            await self.method_repo.delete(method_id)
            await self.uow.commit()
            logger.info(f"Deleted payment method {method.name}")
            return Return.ok(DeletePaymentMethodResultDTO(method_id=method_id, deleted=True, deactivated=False))

        except LedgerError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_PAYMENT_METHOD_FAILED",
                    message="Failed to delete payment method",
                    reason=str(e),
                )
            )
