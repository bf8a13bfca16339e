from .invoice_repository import InvoiceRepository, InvoiceFilter, StatusTotals
from .invoice_line_repository import InvoiceLineRepository
from .payment_repository import PaymentRepository, MethodTotals
from .payment_method_repository import PaymentMethodRepository
from .payment_plan_repository import PaymentPlanRepository
from .recurring_template_repository import RecurringTemplateRepository
from .overdue_config_repository import OverdueConfigRepository
from .reminder_template_repository import ReminderTemplateRepository
from .reminder_log_repository import ReminderLogRepository

__all__ = [
    "InvoiceRepository",
    "InvoiceFilter",
    "StatusTotals",
    "InvoiceLineRepository",
    "PaymentRepository",
    "MethodTotals",
    "PaymentMethodRepository",
    "PaymentPlanRepository",
    "RecurringTemplateRepository",
    "OverdueConfigRepository",
    "ReminderTemplateRepository",
    "ReminderLogRepository",
]
