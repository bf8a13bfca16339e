"""Reminder Template Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from receivables.domain.overdue import ReminderTemplate, ReminderTier


class ReminderTemplateRepository(ABC):
    """Repository interface for ReminderTemplate persistence"""

    @abstractmethod
    async def create(self, template: ReminderTemplate) -> ReminderTemplate:
        pass

    @abstractmethod
    async def get_by_id(self, template_id: int) -> Optional[ReminderTemplate]:
        pass

    @abstractmethod
    async def get_default_for_tier(self, tier: ReminderTier) -> Optional[ReminderTemplate]:
        """
        Default template for a tier, falling back to any template of it

        Args:
            tier: Reminder tier

        Returns:
            ReminderTemplate if one exists for the tier, None otherwise
        """
        pass

    @abstractmethod
    async def list(self, tier: Optional[ReminderTier] = None) -> List[ReminderTemplate]:
        pass

    @abstractmethod
    async def update(self, template: ReminderTemplate) -> ReminderTemplate:
        pass

    @abstractmethod
    async def clear_default(self, tier: ReminderTier, except_id: Optional[int] = None) -> None:
        """
        Unset is_default on every template of a tier

        Args:
            tier: Reminder tier
            except_id: Template to leave untouched
        """
        pass

    @abstractmethod
    async def delete(self, template_id: int) -> None:
        pass
