"""Client Directory Interface

Read-only lookup of client contact data owned by another module.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ClientInfo:
    """Client fields this service relies on"""

    id: int
    name: str
    email: Optional[str] = None


class ClientDirectory(ABC):
    """
    Client directory collaborator

    Implementations may read a local table or call a remote service.
    """

    @abstractmethod
    async def find_by_id(self, client_id: int) -> Optional[ClientInfo]:
        """
        Look up a client by id

        Args:
            client_id: Client identifier

        Returns:
            ClientInfo if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_name(self, query: str) -> List[ClientInfo]:
        """
        Case-insensitive substring search on client name

        Args:
            query: Name fragment

        Returns:
            Matching clients, possibly empty
        """
        pass
