"""Payment Domain Entity

Financial event applied to exactly one invoice.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text
from receivables.domain.base import BaseModel, IdType


class Payment(BaseModel, table=True):
    """
    Payment - Money received against an invoice

    Domain Rules:
    - amount > 0
    - Sum of payment amounts for an invoice equals invoice.amount_paid
    - Deleting a payment reverses its effect on the invoice
    - is_confirmed only gates the client receipt; the amount always counts
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        Index('ix_payments_invoice_id', 'invoice_id'),
        Index('ix_payments_payment_date', 'payment_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique payment identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Amount received"
    )

    payment_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the money was received"
    )

    payment_method_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, ForeignKey("payment_methods.id"), nullable=True),
        description="Foreign key to PaymentMethod"
    )

    reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="External reference (check number, transfer id, ...)"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-form notes"
    )

    is_confirmed: bool = Field(
        default=True,
        description="False while the method's manual confirmation is outstanding"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Record creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
