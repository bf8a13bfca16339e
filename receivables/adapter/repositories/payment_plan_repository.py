"""SQLAlchemy Payment Plan Repository Implementation"""

from typing import List, Optional
from datetime import date, datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.app.repositories.payment_plan_repository import PaymentPlanRepository
from receivables.domain.payment_plan import PaymentPlan, PaymentPlanStatus, Installment, InstallmentStatus


class SqlAlchemyPaymentPlanRepository(PaymentPlanRepository):
    """
    SQLAlchemy implementation of PaymentPlanRepository

    Plans and their installments share one repository because they are
    always written together.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, plan: PaymentPlan, installments: List[Installment]) -> PaymentPlan:
        self.session.add(plan)
        await self.session.flush()
        await self.session.refresh(plan)

        for installment in installments:
            installment.payment_plan_id = plan.id
        self.session.add_all(installments)
        await self.session.flush()
        return plan

    async def get_by_id(self, plan_id: int, for_update: bool = False) -> Optional[PaymentPlan]:
        statement = select(PaymentPlan).where(PaymentPlan.id == plan_id)
        if for_update:
            # Reload rows already in the session with the locked values
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_active_by_invoice_id(self, invoice_id: int) -> Optional[PaymentPlan]:
        statement = (
            select(PaymentPlan)
            .where(PaymentPlan.invoice_id == invoice_id)
            .where(PaymentPlan.status == PaymentPlanStatus.ACTIVE)
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: int) -> List[PaymentPlan]:
        statement = (
            select(PaymentPlan)
            .where(PaymentPlan.invoice_id == invoice_id)
            .order_by(PaymentPlan.created_at.desc(), PaymentPlan.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, plan: PaymentPlan) -> PaymentPlan:
        plan.updated_at = datetime.utcnow()
        self.session.add(plan)
        await self.session.flush()
        await self.session.refresh(plan)
        return plan

    async def get_installments(self, plan_id: int) -> List[Installment]:
        statement = (
            select(Installment)
            .where(Installment.payment_plan_id == plan_id)
            .order_by(Installment.installment_number.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_installment(self, installment_id: int, for_update: bool = False) -> Optional[Installment]:
        statement = select(Installment).where(Installment.id == installment_id)
        if for_update:
            # Reload rows already in the session with the locked values
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_installment_by_payment_id(self, payment_id: int) -> Optional[Installment]:
        result = await self.session.execute(select(Installment).where(Installment.payment_id == payment_id))
        return result.scalar_one_or_none()

    async def update_installment(self, installment: Installment) -> Installment:
        installment.updated_at = datetime.utcnow()
        self.session.add(installment)
        await self.session.flush()
        await self.session.refresh(installment)
        return installment

    async def list_pending_installments_due(
        self, start_date: date, end_date: date, unreminded_only: bool = True
    ) -> List[Installment]:
        statement = (
            select(Installment)
            .join(PaymentPlan, PaymentPlan.id == Installment.payment_plan_id)
            .where(PaymentPlan.status == PaymentPlanStatus.ACTIVE)
            .where(Installment.status == InstallmentStatus.PENDING)
            .where(Installment.due_date >= start_date)
            .where(Installment.due_date <= end_date)
        )
        if unreminded_only:
            statement = statement.where(Installment.reminder_sent == False)  # noqa: E712
        statement = statement.order_by(Installment.due_date.asc(), Installment.id.asc())

        result = await self.session.execute(statement)
        return list(result.scalars().all())
