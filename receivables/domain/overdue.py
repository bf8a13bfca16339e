"""Overdue Escalation Domain Entities

Configuration, message templates and the reminder audit trail.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from receivables.domain.base import BaseModel, IdType


class LateFeeType(str, Enum):
    """How the late fee amount is interpreted"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ReminderTier(str, Enum):
    """Escalation tier of a reminder, in escalation order"""
    GENTLE = "gentle"
    FIRM = "firm"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def next(self) -> "ReminderTier":
        """Next tier up, capped at urgent"""
        return _TIER_ORDER[min(self.rank + 1, len(_TIER_ORDER) - 1)]


_TIER_ORDER = [ReminderTier.GENTLE, ReminderTier.FIRM, ReminderTier.URGENT]


class OverdueConfig(BaseModel, table=True):
    """
    Overdue Config - Singleton escalation settings

    Domain Rules:
    - Exactly one row, seeded at startup
    - No reminder before grace_period_days have passed
    - At most max_reminders reminders per invoice
    - Consecutive reminders at least reminder_frequency_days apart
    - Automatic late fees at most once per late_fee_window_days
    """

    __tablename__ = "overdue_config"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    grace_period_days: int = Field(
        default=3,
        sa_column=Column(Integer, nullable=False, default=3),
        description="Days past due before the first reminder"
    )

    reminder_frequency_days: int = Field(
        default=7,
        sa_column=Column(Integer, nullable=False, default=7),
        description="Minimum days between reminders"
    )

    max_reminders: int = Field(
        default=3,
        sa_column=Column(Integer, nullable=False, default=3),
        description="Reminders sent per invoice before escalation stops"
    )

    late_fee_type: LateFeeType = Field(
        default=LateFeeType.PERCENTAGE,
        description="percentage of the invoice total, or a fixed amount"
    )

    late_fee_amount: Decimal = Field(
        default=Decimal("5.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=5),
        description="Percent or currency amount depending on late_fee_type"
    )

    auto_late_fee: bool = Field(
        default=False,
        description="Apply late fees during the overdue sweep"
    )

    late_fee_window_days: int = Field(
        default=30,
        sa_column=Column(Integer, nullable=False, default=30),
        description="Minimum days between automatic late fees on one invoice"
    )

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ReminderTemplate(BaseModel, table=True):
    """
    Reminder Template - Subject and body for one escalation tier

    Placeholders use {name} syntax: client_name, invoice_number, due_date,
    total_amount, balance_due, days_overdue, late_fee_amount, company_name.
    """

    __tablename__ = "reminder_templates"
    __table_args__ = (
        Index('ix_reminder_templates_tier', 'tier'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False),
    )

    subject: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    body: str = Field(
        sa_column=Column(Text, nullable=False),
    )

    tier: ReminderTier = Field(default=ReminderTier.GENTLE)

    is_default: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ReminderLog(BaseModel, table=True):
    """
    Reminder Log - One row per reminder attempt

    Written whether or not the email went out; drives the next tier.
    """

    __tablename__ = "reminder_logs"
    __table_args__ = (
        Index('ix_reminder_logs_invoice_id', 'invoice_id', 'sent_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
    )

    template_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, nullable=True),
    )

    tier: ReminderTier = Field(default=ReminderTier.GENTLE)

    sent_at: datetime = Field(default_factory=datetime.utcnow)

    success: bool = Field(default=True)

    error_message: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )


DEFAULT_REMINDER_TEMPLATES = [
    {
        "name": "Gentle Reminder",
        "tier": ReminderTier.GENTLE,
        "subject": "Friendly Reminder: Invoice #{invoice_number} is Past Due",
        "body": (
            "Dear {client_name},\n\n"
            "This is a friendly reminder that invoice #{invoice_number} for "
            "{total_amount} was due on {due_date} and is now {days_overdue} days past due.\n\n"
            "The outstanding balance is {balance_due}. If you have already sent payment, "
            "please disregard this message.\n\n"
            "Thank you,\n{company_name}"
        ),
    },
    {
        "name": "Firm Reminder",
        "tier": ReminderTier.FIRM,
        "subject": "Second Notice: Invoice #{invoice_number} is Overdue",
        "body": (
            "Dear {client_name},\n\n"
            "Invoice #{invoice_number} for {total_amount} is now {days_overdue} days overdue "
            "(due {due_date}). The outstanding balance is {balance_due}.\n\n"
            "Please arrange payment at your earliest convenience. Late fees of "
            "{late_fee_amount} may apply.\n\n"
            "Regards,\n{company_name}"
        ),
    },
    {
        "name": "Urgent Reminder",
        "tier": ReminderTier.URGENT,
        "subject": "URGENT: Final Notice for Invoice #{invoice_number}",
        "body": (
            "Dear {client_name},\n\n"
            "This is a final notice. Invoice #{invoice_number} is {days_overdue} days "
            "overdue with an outstanding balance of {balance_due}.\n\n"
            "Immediate payment is required. A late fee of {late_fee_amount} has been or "
            "will be applied to this invoice.\n\n"
            "{company_name}"
        ),
    },
]
