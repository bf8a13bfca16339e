from .dtos import (
    RecurringItemDTO,
    CreateRecurringTemplateCommandDTO,
    UpdateRecurringTemplateCommandDTO,
    RecurringQueryDTO,
    RecurringTemplateDTO,
    DeleteRecurringTemplateResultDTO,
    GenerateInvoiceResultDTO,
    ProcessDueResultDTO,
)
from .templates import (
    CreateRecurringTemplate,
    GetRecurringTemplate,
    ListRecurringTemplates,
    UpdateRecurringTemplate,
    DeleteRecurringTemplate,
    CancelRecurringTemplate,
    ReactivateRecurringTemplate,
)
from .generate_recurring_invoice import GenerateRecurringInvoice
from .process_due import ProcessDueRecurringInvoices

__all__ = [
    "RecurringItemDTO",
    "CreateRecurringTemplateCommandDTO",
    "UpdateRecurringTemplateCommandDTO",
    "RecurringQueryDTO",
    "RecurringTemplateDTO",
    "DeleteRecurringTemplateResultDTO",
    "GenerateInvoiceResultDTO",
    "ProcessDueResultDTO",
    "CreateRecurringTemplate",
    "GetRecurringTemplate",
    "ListRecurringTemplates",
    "UpdateRecurringTemplate",
    "DeleteRecurringTemplate",
    "CancelRecurringTemplate",
    "ReactivateRecurringTemplate",
    "GenerateRecurringInvoice",
    "ProcessDueRecurringInvoices",
]
