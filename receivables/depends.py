from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from receivables.adapter.services.cache import create_cache
from receivables.adapter.services.clock import SystemClock
from receivables.adapter.services.notifier import create_notifier
from receivables.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from receivables.app.services.cache import Cache
from receivables.app.services.clock import Clock
from receivables.app.services.notifier import Notifier

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Process-wide collaborators; replaced through dependency_overrides in tests
cache = create_cache(ApplicationConfig.CACHE_BACKEND, ApplicationConfig.REDIS_URL)
notifier = create_notifier(ApplicationConfig.NOTIFIER_WEBHOOK_URL)
clock = SystemClock()


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_cache() -> Cache:
    return cache


def get_notifier() -> Notifier:
    return notifier


def get_clock() -> Clock:
    return clock
