"""Payment Repository Interface

Defines the contract for payment persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional
from receivables.domain.payment import Payment


@dataclass
class MethodTotals:
    """Payments aggregated for one payment method"""

    payment_method_id: Optional[int]
    count: int
    total_amount: Decimal


class PaymentRepository(ABC):
    """
    Repository interface for Payment persistence

    The sum of an invoice's payments is the source of truth for
    invoice.amount_paid.
    """

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """
        Retrieve payment by ID

        Args:
            payment_id: Payment ID

        Returns:
            Payment if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[Payment]:
        """
        Retrieve all payments for an invoice, newest payment date first

        Args:
            invoice_id: Invoice ID

        Returns:
            List of payments (empty when none)
        """
        pass

    @abstractmethod
    async def sum_by_invoice_id(self, invoice_id: int) -> Decimal:
        """
        Sum of payment amounts for an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            Total paid (0 when no payments)
        """
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """
        Update an existing payment

        Args:
            payment: Payment entity with updated values

        Returns:
            Updated Payment
        """
        pass

    @abstractmethod
    async def delete(self, payment_id: int) -> None:
        """
        Delete a payment

        Args:
            payment_id: Payment ID
        """
        pass

    @abstractmethod
    async def count_by_method(self, payment_method_id: int) -> int:
        """
        Number of payments made with a payment method

        Args:
            payment_method_id: PaymentMethod ID

        Returns:
            Payment count
        """
        pass

    @abstractmethod
    async def totals_by_method(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[MethodTotals]:
        """
        Aggregate payments per method within an optional date range

        Args:
            start_date: Inclusive lower bound on payment_date
            end_date: Inclusive upper bound on payment_date

        Returns:
            One MethodTotals per method used
        """
        pass
