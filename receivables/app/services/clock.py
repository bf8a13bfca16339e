"""Clock Interface

Source of "today" and "now" for every date-dependent rule.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime


class Clock(ABC):
    """Abstract clock so tests can pin the current date"""

    @abstractmethod
    def now(self) -> datetime:
        """Current UTC timestamp (naive)"""
        pass

    def today(self) -> date:
        return self.now().date()
