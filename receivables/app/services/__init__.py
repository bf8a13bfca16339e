from .unit_of_work import UnitOfWork
from .clock import Clock
from .cache import Cache
from .client_directory import ClientDirectory, ClientInfo
from .notifier import Notifier, EmailMessage, EmailResult, Notification
from .pdf_service import PdfService

__all__ = [
    "UnitOfWork",
    "Clock",
    "Cache",
    "ClientDirectory",
    "ClientInfo",
    "Notifier",
    "EmailMessage",
    "EmailResult",
    "Notification",
    "PdfService",
]
