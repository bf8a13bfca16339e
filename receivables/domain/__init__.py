from .base import BaseModel, to_money
from .client import Client
from .invoice import Invoice, InvoiceStatus
from .invoice_line import InvoiceLine, LineItemKind
from .payment import Payment
from .payment_method import PaymentMethod
from .payment_plan import PaymentPlan, PaymentPlanStatus, Installment, InstallmentStatus
from .recurring_template import (
    RecurringInvoiceTemplate,
    RecurringTemplateItem,
    RecurringInvoiceHistory,
    Frequency,
    RecurringStatus,
)
from .overdue import OverdueConfig, LateFeeType, ReminderTemplate, ReminderTier, ReminderLog

__all__ = [
    "BaseModel",
    "to_money",
    "Client",
    "Invoice",
    "InvoiceStatus",
    "InvoiceLine",
    "LineItemKind",
    "Payment",
    "PaymentMethod",
    "PaymentPlan",
    "PaymentPlanStatus",
    "Installment",
    "InstallmentStatus",
    "RecurringInvoiceTemplate",
    "RecurringTemplateItem",
    "RecurringInvoiceHistory",
    "Frequency",
    "RecurringStatus",
    "OverdueConfig",
    "LateFeeType",
    "ReminderTemplate",
    "ReminderTier",
    "ReminderLog",
]
