"""Schema creation and default data

Runs once at startup, outside request handling.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select, func
from sqlmodel.ext.asyncio.session import AsyncSession
import receivables.domain  # noqa: F401  registers every table on SQLModel.metadata
from receivables.domain.overdue import OverdueConfig, ReminderTemplate, DEFAULT_REMINDER_TEMPLATES
from receivables.domain.payment_method import PaymentMethod, DEFAULT_PAYMENT_METHODS

logger = logging.getLogger(__name__)


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def seed_defaults(session: AsyncSession) -> None:
    """
    Insert default rows into empty tables

    Seeds the overdue config singleton, one default reminder template per
    tier and the standard payment methods. Tables that already hold rows
    are left alone.
    """
    if await _count(session, OverdueConfig) == 0:
        session.add(OverdueConfig())
        logger.info("Seeded default overdue configuration")

    if await _count(session, ReminderTemplate) == 0:
        for template in DEFAULT_REMINDER_TEMPLATES:
            session.add(ReminderTemplate(is_default=True, **template))
        logger.info(f"Seeded {len(DEFAULT_REMINDER_TEMPLATES)} reminder templates")

    if await _count(session, PaymentMethod) == 0:
        for method in DEFAULT_PAYMENT_METHODS:
            session.add(PaymentMethod(**method))
        logger.info(f"Seeded {len(DEFAULT_PAYMENT_METHODS)} payment methods")

    await session.commit()


async def init_schema(engine: AsyncEngine) -> None:
    """Create all tables and seed defaults"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        await seed_defaults(session)
