from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_line_repository import SqlAlchemyInvoiceLineRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .payment_method_repository import SqlAlchemyPaymentMethodRepository
from .payment_plan_repository import SqlAlchemyPaymentPlanRepository
from .recurring_template_repository import SqlAlchemyRecurringTemplateRepository
from .overdue_config_repository import SqlAlchemyOverdueConfigRepository
from .reminder_template_repository import SqlAlchemyReminderTemplateRepository
from .reminder_log_repository import SqlAlchemyReminderLogRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceLineRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyPaymentMethodRepository",
    "SqlAlchemyPaymentPlanRepository",
    "SqlAlchemyRecurringTemplateRepository",
    "SqlAlchemyOverdueConfigRepository",
    "SqlAlchemyReminderTemplateRepository",
    "SqlAlchemyReminderLogRepository",
]
