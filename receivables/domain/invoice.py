"""Invoice Domain Entity

Billable document for one client, tracking totals, payments and status.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date, Text
from receivables.domain.base import BaseModel, IdType


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    PENDING = "pending"
    SENT = "sent"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELED = "canceled"


# Statuses that still expect money from the client
OPEN_STATUSES = frozenset({
    InvoiceStatus.PENDING,
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIAL,
    InvoiceStatus.OVERDUE,
})

# Statuses the overdue sweep escalates
COLLECTIBLE_STATUSES = frozenset({
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIAL,
    InvoiceStatus.OVERDUE,
})


class Invoice(BaseModel, table=True):
    """
    Invoice - Billable document for a client

    Domain Rules:
    - invoice_number must be unique
    - 0 <= amount_paid <= total_amount
    - total_amount = subtotal + tax_total = sum of invoice lines (amount + tax)
    - Status transitions: draft -> pending -> sent -> partial/paid/overdue,
      canceled only from draft or pending
    - Deletable only while pending
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_client_id', 'client_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_due_date', 'due_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    client_id: int = Field(
        description="Client the invoice is billed to"
    )

    estimate_id: Optional[int] = Field(
        default=None,
        description="Source estimate, if the invoice was converted from one"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., INV-202501-0001)"
    )

    title: str = Field(
        default="",
        sa_column=Column(String(255), nullable=False, default=""),
        description="Invoice title"
    )

    description: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Free-form description"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.PENDING,
        description="Invoice status"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False, default="USD"),
        description="Currency code (ISO 4217)"
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of line amounts before tax"
    )

    tax_total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of line tax amounts"
    )

    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Total invoice amount (subtotal + tax)"
    )

    amount_paid: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of recorded payments"
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Payment due date"
    )

    sent_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when invoice was sent to the client"
    )

    paid_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when invoice became fully paid"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @property
    def remaining_balance(self) -> Decimal:
        return self.total_amount - self.amount_paid

    def is_past_due(self, today: date) -> bool:
        return self.due_date < today
