"""Invoice lifecycle use cases"""
from .create_invoice import CreateInvoice
from .get_invoice import GetInvoice, ListInvoices
from .update_invoice import UpdateInvoice
from .delete_invoice import DeleteInvoice
from .transitions import SendInvoice, CancelInvoice, email_invoice
from .mark_invoice_paid import MarkInvoicePaid
from .generate_invoice_pdf import GenerateInvoicePdf
from .get_invoice_summary import GetInvoiceSummary
from .dtos import (
    LineItemDTO,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    ListInvoicesQueryDTO,
    MarkInvoicePaidCommandDTO,
    InvoiceLineResponseDTO,
    InvoiceResponseDTO,
    DeleteInvoiceResponseDTO,
    SendInvoiceResponseDTO,
    StatusSummaryDTO,
    InvoiceSummaryDTO,
    InvoicePdfDTO,
)

__all__ = [
    "CreateInvoice",
    "GetInvoice",
    "ListInvoices",
    "UpdateInvoice",
    "DeleteInvoice",
    "SendInvoice",
    "CancelInvoice",
    "email_invoice",
    "MarkInvoicePaid",
    "GenerateInvoicePdf",
    "GetInvoiceSummary",
    "LineItemDTO",
    "CreateInvoiceCommandDTO",
    "UpdateInvoiceCommandDTO",
    "ListInvoicesQueryDTO",
    "MarkInvoicePaidCommandDTO",
    "InvoiceLineResponseDTO",
    "InvoiceResponseDTO",
    "DeleteInvoiceResponseDTO",
    "SendInvoiceResponseDTO",
    "StatusSummaryDTO",
    "InvoiceSummaryDTO",
    "InvoicePdfDTO",
]
