"""Cache Interface

Key -> value store with per-entry expiry, used for read-heavy reports.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class Cache(ABC):
    """
    Abstract cache

    Values must be JSON-serializable so every backend can store them.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a cached value

        Args:
            key: Cache key

        Returns:
            The value, or None when missing or expired
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """
        Store a value

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl_seconds: Seconds until the entry expires
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass
