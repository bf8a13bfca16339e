"""Overdue Config Repository Interface"""

from abc import ABC, abstractmethod
from receivables.domain.overdue import OverdueConfig


class OverdueConfigRepository(ABC):
    """Repository interface for the singleton OverdueConfig"""

    @abstractmethod
    async def get(self) -> OverdueConfig:
        """
        Retrieve the configuration, creating the default row if missing

        Returns:
            The OverdueConfig singleton
        """
        pass

    @abstractmethod
    async def update(self, config: OverdueConfig) -> OverdueConfig:
        pass
