from .unit_of_work import SqlAlchemyUnitOfWork
from .notifier import (
    LoggingNotifier,
    WebhookNotifier,
    CompositeNotifier,
    create_notifier,
)
from .cache import InMemoryCache, RedisCache, create_cache
from .client_directory import SqlClientDirectory
from .clock import SystemClock
from .pdf_service import ReportLabPdfService
from .schema import init_schema, seed_defaults

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotifier",
    "WebhookNotifier",
    "CompositeNotifier",
    "create_notifier",
    "InMemoryCache",
    "RedisCache",
    "create_cache",
    "SqlClientDirectory",
    "SystemClock",
    "ReportLabPdfService",
    "init_schema",
    "seed_defaults",
]
