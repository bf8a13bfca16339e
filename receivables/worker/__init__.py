"""Background workers for the receivables service"""
from .recurring_invoices import RecurringInvoiceWorker
from .overdue_invoices import OverdueInvoiceWorker

__all__ = ["RecurringInvoiceWorker", "OverdueInvoiceWorker"]
