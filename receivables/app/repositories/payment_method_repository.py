"""Payment Method Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from receivables.domain.payment_method import PaymentMethod


class PaymentMethodRepository(ABC):
    """Repository interface for PaymentMethod persistence"""

    @abstractmethod
    async def create(self, method: PaymentMethod) -> PaymentMethod:
        pass

    @abstractmethod
    async def get_by_id(self, method_id: int) -> Optional[PaymentMethod]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[PaymentMethod]:
        pass

    @abstractmethod
    async def list(self, active_only: bool = False) -> List[PaymentMethod]:
        """
        List payment methods ordered by name

        Args:
            active_only: Exclude deactivated methods

        Returns:
            List of payment methods
        """
        pass

    @abstractmethod
    async def update(self, method: PaymentMethod) -> PaymentMethod:
        pass

    @abstractmethod
    async def delete(self, method_id: int) -> None:
        pass
