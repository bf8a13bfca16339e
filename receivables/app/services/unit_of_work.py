"""Unit of Work Interface

Transaction boundary shared by the repositories of one use case.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Abstract unit of work

    Repositories flush into the same transaction; the use case decides
    when to commit or roll back.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
