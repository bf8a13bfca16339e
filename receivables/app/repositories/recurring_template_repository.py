"""Recurring Template Repository Interface

Defines the contract for recurring templates, their items and history.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from receivables.domain.recurring_template import (
    RecurringInvoiceTemplate,
    RecurringTemplateItem,
    RecurringInvoiceHistory,
    RecurringStatus,
    Frequency,
)


class RecurringTemplateRepository(ABC):
    """
    Repository interface for RecurringInvoiceTemplate persistence

    A template aggregate is the template row, its ordered items and the
    history of generated invoices.
    """

    @abstractmethod
    async def create(
        self, template: RecurringInvoiceTemplate, items: List[RecurringTemplateItem]
    ) -> RecurringInvoiceTemplate:
        """
        Create a template together with its items

        Args:
            template: Template entity to persist
            items: Items without template_id set

        Returns:
            Created template with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, template_id: int, for_update: bool = False) -> Optional[RecurringInvoiceTemplate]:
        """
        Retrieve template by ID

        Args:
            template_id: Template ID
            for_update: If True, lock the row until commit so concurrent
                sweeps cannot generate the same occurrence twice

        Returns:
            Template if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(
        self,
        client_id: Optional[int] = None,
        status: Optional[RecurringStatus] = None,
        frequency: Optional[Frequency] = None,
    ) -> List[RecurringInvoiceTemplate]:
        pass

    @abstractmethod
    async def list_due(self, today: date) -> List[RecurringInvoiceTemplate]:
        """
        Active templates whose next_date is on or before today

        Args:
            today: Current date

        Returns:
            Due templates ordered by next_date
        """
        pass

    @abstractmethod
    async def update(self, template: RecurringInvoiceTemplate) -> RecurringInvoiceTemplate:
        pass

    @abstractmethod
    async def delete(self, template_id: int) -> None:
        pass

    @abstractmethod
    async def get_items(self, template_id: int) -> List[RecurringTemplateItem]:
        pass

    @abstractmethod
    async def replace_items(self, template_id: int, items: List[RecurringTemplateItem]) -> List[RecurringTemplateItem]:
        """
        Replace the template's item set

        Args:
            template_id: Template ID
            items: New items without template_id set

        Returns:
            Created items
        """
        pass

    @abstractmethod
    async def add_history(self, history: RecurringInvoiceHistory) -> RecurringInvoiceHistory:
        pass

    @abstractmethod
    async def get_history(self, template_id: int) -> List[RecurringInvoiceHistory]:
        pass

    @abstractmethod
    async def count_history(self, template_id: int) -> int:
        pass
