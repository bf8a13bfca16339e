"""Payment Plan Domain Entities

Splits an invoice's remaining balance into dated installments.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from receivables.domain.base import BaseModel, IdType


class PaymentPlanStatus(str, Enum):
    """Payment plan status"""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"


class InstallmentStatus(str, Enum):
    """Installment status"""
    PENDING = "pending"
    PAID = "paid"
    CANCELED = "canceled"


class PaymentPlan(BaseModel, table=True):
    """
    Payment Plan - Installment schedule for one invoice

    Domain Rules:
    - Sum of installment amounts equals the invoice remaining balance at creation
    - At least 2 installments
    - At most one active plan per invoice
    - completed when installments_paid == total_installments
    - canceling marks every pending installment canceled
    """

    __tablename__ = "payment_plans"
    __table_args__ = (
        Index('ix_payment_plans_invoice_id', 'invoice_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    description: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
    )

    total_installments: int = Field(
        sa_column=Column(Integer, nullable=False),
    )

    installments_paid: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    status: PaymentPlanStatus = Field(default=PaymentPlanStatus.ACTIVE)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Installment(BaseModel, table=True):
    """
    Installment - One dated slice of a payment plan

    Domain Rules:
    - pending -> paid exactly once, linked to the satisfying payment
    - amount is fixed; paying it requires the exact amount
    """

    __tablename__ = "payment_plan_installments"
    __table_args__ = (
        Index('ix_installments_plan_id', 'payment_plan_id'),
        Index('ix_installments_status_due', 'status', 'due_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    payment_plan_id: int = Field(
        sa_column=Column(IdType, ForeignKey("payment_plans.id", ondelete="CASCADE"), nullable=False),
    )

    installment_number: int = Field(
        sa_column=Column(Integer, nullable=False),
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
    )

    status: InstallmentStatus = Field(default=InstallmentStatus.PENDING)

    payment_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, nullable=True),
    )

    reminder_sent: bool = Field(default=False)

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
