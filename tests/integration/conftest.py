import pytest
import pytest_asyncio
from datetime import date, datetime, time
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from receivables.depends import get_session, get_clock, get_notifier, get_cache
from receivables.adapter.services.cache import InMemoryCache
from receivables.adapter.services.notifier import LoggingNotifier
from receivables.adapter.services.schema import init_schema
from receivables.app.services.clock import Clock
from receivables.domain.client import Client


class FixedClock(Clock):
    """Clock pinned to one instant; tests move it with advance_to"""

    def __init__(self, today: date):
        self.current = datetime.combine(today, time(9, 0))

    def now(self) -> datetime:
        return self.current

    def advance_to(self, today: date) -> None:
        self.current = datetime.combine(today, time(9, 0))


@pytest.fixture
def clock():
    """Clock fixed at 2025-03-01 09:00"""
    return FixedClock(date(2025, 3, 1))


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'receivables_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    # Tables plus default config, reminder templates and payment methods
    await init_schema(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client_id(db_session):
    """Billable client with an email address"""
    client = Client(name="Acme Corp", email="billing@acme.test")
    db_session.add(client)
    await db_session.commit()
    await db_session.refresh(client)
    return client.id


@pytest_asyncio.fixture
async def client(db_session, clock):
    """Create test client with database session and clock overrides"""
    from receivables.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    notifier = LoggingNotifier()
    cache = InMemoryCache()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_cache] = lambda: cache

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
