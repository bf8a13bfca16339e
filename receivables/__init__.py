"""Receivables service: invoice lifecycle, payments, recurring billing and overdue escalation"""

__version__ = "0.1.0"
