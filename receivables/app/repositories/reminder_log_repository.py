"""Reminder Log Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from receivables.domain.overdue import ReminderLog


class ReminderLogRepository(ABC):
    """
    Repository interface for ReminderLog persistence

    Logs are append-only.
    """

    @abstractmethod
    async def create(self, log: ReminderLog) -> ReminderLog:
        """
        Append a reminder attempt

        Args:
            log: ReminderLog entity to persist

        Returns:
            Created ReminderLog with generated ID
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[ReminderLog]:
        """
        Reminder attempts for an invoice, most recent first

        Args:
            invoice_id: Invoice ID

        Returns:
            List of reminder logs (empty when none)
        """
        pass
