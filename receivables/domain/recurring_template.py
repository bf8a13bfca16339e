"""Recurring Invoice Template Domain Entities

Templates that generate concrete invoices on a calendar schedule.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from receivables.domain.base import BaseModel, IdType


class Frequency(str, Enum):
    """Recurrence period"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecurringStatus(str, Enum):
    """Recurring template status"""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"


class RecurringInvoiceTemplate(BaseModel, table=True):
    """
    Recurring Invoice Template - Generates invoices on a schedule

    Domain Rules:
    - interval >= 1
    - end_date, when set, is not before next_date
    - Each generation advances next_date exactly one period
    - Monthly, quarterly and yearly steps land on anchor_day, clamped to
      the month length
    - Advancing past end_date flips status to completed
    - Only active templates generate invoices
    """

    __tablename__ = "recurring_templates"
    __table_args__ = (
        CheckConstraint('"interval" >= 1', name='recurring_interval_positive'),
        Index('ix_recurring_templates_status_next', 'status', 'next_date'),
        Index('ix_recurring_templates_client_id', 'client_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique template identifier (auto-increment)"
    )

    client_id: int = Field(
        description="Client the generated invoices are billed to"
    )

    title: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Title copied onto generated invoices"
    )

    description: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Description copied onto generated invoices"
    )

    frequency: Frequency = Field(
        description="Recurrence period"
    )

    interval: int = Field(
        default=1,
        sa_column=Column("interval", Integer, nullable=False, default=1),
        description="Number of periods between generations"
    )

    next_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date of the next generation"
    )

    anchor_day: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Day of month calendar steps return to (day of the first next_date)"
    )

    end_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Last date a generation may happen on"
    )

    due_days: int = Field(
        default=14,
        sa_column=Column(Integer, nullable=False, default=14),
        description="Days between generation and the invoice due date"
    )

    auto_send: bool = Field(
        default=True,
        description="Mark generated invoices sent and email the client"
    )

    status: RecurringStatus = Field(
        default=RecurringStatus.ACTIVE,
        description="Template status"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
    )


class RecurringTemplateItem(BaseModel, table=True):
    """Line item copied onto every generated invoice"""

    __tablename__ = "recurring_template_items"
    __table_args__ = (
        Index('ix_recurring_template_items_template_id', 'template_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    template_id: int = Field(
        sa_column=Column(IdType, ForeignKey("recurring_templates.id", ondelete="CASCADE"), nullable=False),
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 4), nullable=False),
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(9, 4), nullable=False, default=0),
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )


class RecurringInvoiceHistory(BaseModel, table=True):
    """Links a template to each invoice it generated"""

    __tablename__ = "recurring_invoice_history"
    __table_args__ = (
        Index('ix_recurring_history_template_id', 'template_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    template_id: int = Field(
        sa_column=Column(IdType, ForeignKey("recurring_templates.id", ondelete="CASCADE"), nullable=False),
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, nullable=False),
    )

    scheduled_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="next_date the generation was due on"
    )

    generated_at: datetime = Field(
        default_factory=datetime.utcnow,
    )
