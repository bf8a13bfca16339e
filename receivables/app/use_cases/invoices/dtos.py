"""Data Transfer Objects for Invoice Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.invoice_line import InvoiceLine


class LineItemDTO(BaseModel):
    """
    Line item input

    Values stay loosely typed so the use case can report every invalid
    field at once instead of failing on the first one.
    """

    description: Optional[str] = Field(
        default=None,
        description="Line item description (required, non-empty)"
    )

    quantity: Optional[Any] = Field(
        default=None,
        description="Quantity (numeric, >= 0)"
    )

    unit_price: Optional[Any] = Field(
        default=None,
        description="Price per unit (numeric, >= 0)"
    )

    tax_rate: Optional[Any] = Field(
        default=0,
        description="Tax rate in percent (numeric, >= 0)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "description": "Consulting hours",
                "quantity": "10",
                "unit_price": "100.00",
                "tax_rate": "8.25"
            }
        }


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice

    Used as input to CreateInvoice use case.
    """

    client_id: Optional[int] = Field(
        default=None,
        description="Client to bill (required)"
    )

    due_date: Optional[date] = Field(
        default=None,
        description="Payment due date (required)"
    )

    items: List[LineItemDTO] = Field(
        default_factory=list,
        description="At least one line item"
    )

    title: str = Field(default="", description="Invoice title")

    description: str = Field(default="", description="Free-form description")

    invoice_number: Optional[str] = Field(
        default=None,
        description="Explicit invoice number; generated when omitted"
    )

    estimate_id: Optional[int] = Field(default=None, description="Source estimate")

    currency: str = Field(default="USD", description="Currency code (ISO 4217)")

    status: Optional[InvoiceStatus] = Field(
        default=None,
        description="Initial status: pending (default) or draft"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 1,
                "due_date": "2025-02-15",
                "title": "January services",
                "items": [
                    {"description": "Consulting hours", "quantity": "10", "unit_price": "100.00", "tax_rate": "0"}
                ]
            }
        }


class UpdateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for updating an invoice

    Only supplied fields are changed. Supplying items replaces the
    standard line items; late-fee lines are kept.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    currency: Optional[str] = None
    items: Optional[List[LineItemDTO]] = None
    status: Optional[InvoiceStatus] = Field(
        default=None,
        description="Explicit status change, validated against the state machine"
    )


class ListInvoicesQueryDTO(BaseModel):
    """Filters for ListInvoices"""

    client_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class MarkInvoicePaidCommandDTO(BaseModel):
    """
    Command DTO for MarkInvoicePaid

    With a payment method, a payment for the outstanding balance is
    recorded through the normal payment path. Without one, the balance is
    settled by an unattributed payment.
    """

    payment_method_id: Optional[int] = None
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class InvoiceLineResponseDTO(BaseModel):
    id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    amount: Decimal
    tax_amount: Decimal
    kind: str
    position: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, line: InvoiceLine) -> "InvoiceLineResponseDTO":
        return cls(
            id=line.id,
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
            amount=line.amount,
            tax_amount=line.tax_amount,
            kind=getattr(line.kind, "value", line.kind),
            position=line.position,
            created_at=line.created_at,
        )


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice operations

    Returned by create, read, update and explicit transitions.
    """

    id: int = Field(..., description="Invoice ID")
    client_id: int = Field(..., description="Billed client")
    estimate_id: Optional[int] = Field(default=None, description="Source estimate")
    invoice_number: str = Field(..., description="Unique invoice number")
    title: str = Field(..., description="Invoice title")
    description: str = Field(..., description="Free-form description")
    status: str = Field(..., description="Invoice status")
    currency: str = Field(..., description="Currency code")
    subtotal: Decimal = Field(..., description="Sum of line amounts before tax")
    tax_total: Decimal = Field(..., description="Sum of line taxes")
    total_amount: Decimal = Field(..., description="subtotal + tax_total")
    amount_paid: Decimal = Field(..., description="Sum of recorded payments")
    remaining_balance: Decimal = Field(..., description="total_amount - amount_paid")
    due_date: date = Field(..., description="Payment due date")
    sent_at: Optional[datetime] = Field(default=None, description="When the invoice was sent")
    paid_at: Optional[datetime] = Field(default=None, description="When the invoice became paid")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    items: List[InvoiceLineResponseDTO] = Field(default_factory=list, description="Line items")

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "client_id": 1,
                "invoice_number": "INV-202501-0001",
                "title": "January services",
                "description": "",
                "status": "partial",
                "currency": "USD",
                "subtotal": "1000.00",
                "tax_total": "0.00",
                "total_amount": "1000.00",
                "amount_paid": "400.00",
                "remaining_balance": "600.00",
                "due_date": "2025-02-15",
                "created_at": "2025-01-15T10:00:00",
                "updated_at": "2025-01-20T10:00:00",
                "items": []
            }
        }

    @classmethod
    def from_entity(cls, invoice: Invoice, lines: Optional[List[InvoiceLine]] = None) -> "InvoiceResponseDTO":
        return cls(
            id=invoice.id,
            client_id=invoice.client_id,
            estimate_id=invoice.estimate_id,
            invoice_number=invoice.invoice_number,
            title=invoice.title,
            description=invoice.description,
            status=getattr(invoice.status, "value", invoice.status),
            currency=invoice.currency,
            subtotal=invoice.subtotal,
            tax_total=invoice.tax_total,
            total_amount=invoice.total_amount,
            amount_paid=invoice.amount_paid,
            remaining_balance=invoice.remaining_balance,
            due_date=invoice.due_date,
            sent_at=invoice.sent_at,
            paid_at=invoice.paid_at,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            items=[InvoiceLineResponseDTO.from_entity(line) for line in (lines or [])],
        )


class DeleteInvoiceResponseDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    deleted: bool = True


class SendInvoiceResponseDTO(BaseModel):
    invoice: InvoiceResponseDTO
    email_sent: bool = Field(..., description="Whether the client email was delivered")
    notification_failed: bool = Field(
        default=False,
        description="True when the notifier failed; the invoice is still sent"
    )


class StatusSummaryDTO(BaseModel):
    count: int
    total_amount: Decimal
    amount_paid: Decimal


class InvoiceSummaryDTO(BaseModel):
    """
    Response DTO for GetInvoiceSummary

    Aggregated over every invoice; canceled and draft invoices are
    excluded from billed/collected totals.
    """

    total_invoices: int
    by_status: Dict[str, StatusSummaryDTO]
    total_billed: Decimal
    total_collected: Decimal
    total_outstanding: Decimal
    collection_rate: float = Field(..., description="Collected / billed in percent, 2 decimals")
    generated_at: datetime


class InvoicePdfDTO(BaseModel):
    invoice_id: int
    filename: str
    content: bytes
