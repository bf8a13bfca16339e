"""Invoice Line Domain Entity

Tracks individual line items within an invoice.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String
from receivables.domain.base import BaseModel, IdType


class LineItemKind(str, Enum):
    """Origin of a line item"""
    STANDARD = "standard"
    LATE_FEE = "late_fee"


LATE_FEE_DESCRIPTION = "Late Payment Fee"


class InvoiceLine(BaseModel, table=True):
    """
    Invoice Line - Individual line item within an invoice

    Domain Rules:
    - Each line item belongs to exactly one invoice
    - amount = quantity * unit_price, tax_amount = amount * tax_rate / 100
    - Replaced as a set whenever the invoice items change
    """

    __tablename__ = "invoice_lines"
    __table_args__ = (
        Index('ix_invoice_lines_invoice_id', 'invoice_id'),
        Index('ix_invoice_lines_kind', 'invoice_id', 'kind'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice line identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Line item description"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 4), nullable=False),
        description="Quantity (hours, units, ...)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Price per unit"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(9, 4), nullable=False, default=0),
        description="Tax rate in percent"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Pre-tax amount (quantity * unit_price)"
    )

    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Tax on this line"
    )

    kind: LineItemKind = Field(
        default=LineItemKind.STANDARD,
        description="Standard item or system-applied late fee"
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Ordering within the invoice"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Line item creation timestamp"
    )

    @property
    def line_total(self) -> Decimal:
        return self.amount + self.tax_amount
