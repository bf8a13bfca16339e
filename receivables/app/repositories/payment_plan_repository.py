"""Payment Plan Repository Interface

Defines the contract for payment plan and installment persistence.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from receivables.domain.payment_plan import PaymentPlan, Installment


class PaymentPlanRepository(ABC):
    """
    Repository interface for PaymentPlan and Installment persistence

    Installments are only ever accessed through their plan's aggregate.
    """

    @abstractmethod
    async def create(self, plan: PaymentPlan, installments: List[Installment]) -> PaymentPlan:
        """
        Create a plan together with its installments

        Args:
            plan: PaymentPlan entity to persist
            installments: Installments without payment_plan_id set

        Returns:
            Created PaymentPlan with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, plan_id: int, for_update: bool = False) -> Optional[PaymentPlan]:
        """
        Retrieve plan by ID

        Args:
            plan_id: PaymentPlan ID
            for_update: If True, lock the row until commit

        Returns:
            PaymentPlan if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_active_by_invoice_id(self, invoice_id: int) -> Optional[PaymentPlan]:
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[PaymentPlan]:
        pass

    @abstractmethod
    async def update(self, plan: PaymentPlan) -> PaymentPlan:
        pass

    @abstractmethod
    async def get_installments(self, plan_id: int) -> List[Installment]:
        """
        Installments of a plan, in installment_number order

        Args:
            plan_id: PaymentPlan ID

        Returns:
            List of installments
        """
        pass

    @abstractmethod
    async def get_installment(self, installment_id: int, for_update: bool = False) -> Optional[Installment]:
        pass

    @abstractmethod
    async def get_installment_by_payment_id(self, payment_id: int) -> Optional[Installment]:
        pass

    @abstractmethod
    async def update_installment(self, installment: Installment) -> Installment:
        pass

    @abstractmethod
    async def list_pending_installments_due(
        self, start_date: date, end_date: date, unreminded_only: bool = True
    ) -> List[Installment]:
        """
        Pending installments of active plans due within a date range

        Args:
            start_date: Inclusive lower bound on due_date
            end_date: Inclusive upper bound on due_date
            unreminded_only: Skip installments that already got a reminder

        Returns:
            Installments ordered by due date
        """
        pass
