"""Data Transfer Objects for Payment Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from receivables.domain.invoice import Invoice
from receivables.domain.payment import Payment
from receivables.domain.payment_method import PaymentMethod
from receivables.domain.payment_plan import PaymentPlan, Installment


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a payment

    Used as input to RecordPayment and RecordInstallmentPayment.
    amount is validated by the use case (numeric, > 0, at most 2 decimals,
    not above the remaining balance).
    """

    amount: Optional[Any] = Field(
        default=None,
        description="Amount received"
    )

    payment_method_id: Optional[int] = Field(
        default=None,
        description="Active payment method (required)"
    )

    payment_date: Optional[date] = Field(
        default=None,
        description="Date received; defaults to today"
    )

    reference: Optional[str] = Field(
        default=None,
        max_length=100,
        description="External reference (check number, transfer id, ...)"
    )

    notes: Optional[str] = Field(default=None, description="Free-form notes")

    is_confirmed: Optional[bool] = Field(
        default=None,
        description="Pre-confirm a payment whose method requires confirmation"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "400.00",
                "payment_method_id": 1,
                "payment_date": "2025-01-20",
                "reference": "CHK-1042"
            }
        }


class UpdatePaymentCommandDTO(BaseModel):
    """Partial update of a payment; only supplied fields change"""

    amount: Optional[Any] = None
    payment_method_id: Optional[int] = None
    payment_date: Optional[date] = None
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class PaymentResponseDTO(BaseModel):
    id: int = Field(..., description="Payment ID")
    invoice_id: int = Field(..., description="Invoice the payment applies to")
    amount: Decimal = Field(..., description="Amount received")
    payment_date: date = Field(..., description="Date received")
    payment_method_id: Optional[int] = Field(default=None, description="Payment method")
    payment_method_name: Optional[str] = Field(default=None, description="Payment method name")
    reference: Optional[str] = None
    notes: Optional[str] = None
    is_confirmed: bool = Field(..., description="False while confirmation is outstanding")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, payment: Payment, method: Optional[PaymentMethod] = None) -> "PaymentResponseDTO":
        return cls(
            id=payment.id,
            invoice_id=payment.invoice_id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            payment_method_id=payment.payment_method_id,
            payment_method_name=method.name if method else None,
            reference=payment.reference,
            notes=payment.notes,
            is_confirmed=payment.is_confirmed,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class InvoiceBalanceDTO(BaseModel):
    """Invoice state after a payment mutation"""

    invoice_id: int
    invoice_number: str
    status: str
    total_amount: Decimal
    amount_paid: Decimal
    remaining_balance: Decimal
    paid_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceBalanceDTO":
        return cls(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            status=getattr(invoice.status, "value", invoice.status),
            total_amount=invoice.total_amount,
            amount_paid=invoice.amount_paid,
            remaining_balance=invoice.remaining_balance,
            paid_at=invoice.paid_at,
        )


class PaymentResultDTO(BaseModel):
    """
    Response DTO for payment mutations

    notification_failed reports a notifier problem; the payment itself
    is committed regardless.
    """

    payment: Optional[PaymentResponseDTO] = None
    invoice: InvoiceBalanceDTO
    notification_failed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "payment": {
                    "id": 12,
                    "invoice_id": 1,
                    "amount": "400.00",
                    "payment_date": "2025-01-20",
                    "payment_method_id": 1,
                    "payment_method_name": "Credit Card",
                    "is_confirmed": True,
                    "created_at": "2025-01-20T10:00:00",
                    "updated_at": "2025-01-20T10:00:00"
                },
                "invoice": {
                    "invoice_id": 1,
                    "invoice_number": "INV-202501-0001",
                    "status": "partial",
                    "total_amount": "1000.00",
                    "amount_paid": "400.00",
                    "remaining_balance": "600.00"
                },
                "notification_failed": False
            }
        }


class PaymentStatisticsQueryDTO(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class MethodStatisticsDTO(BaseModel):
    payment_method_id: Optional[int]
    payment_method_name: str
    count: int
    total_amount: Decimal


class PaymentStatisticsDTO(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_payments: int
    total_amount: Decimal
    average_amount: Decimal
    by_method: List[MethodStatisticsDTO]


class CreatePaymentMethodCommandDTO(BaseModel):
    name: str = Field(..., description="Unique method name")
    description: str = Field(default="")
    requires_confirmation: bool = Field(default=False)
    is_active: bool = Field(default=True)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Wire Transfer",
                "description": "International wire",
                "requires_confirmation": True
            }
        }


class UpdatePaymentMethodCommandDTO(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    requires_confirmation: Optional[bool] = None
    is_active: Optional[bool] = None


class PaymentMethodDTO(BaseModel):
    id: int
    name: str
    description: str
    is_active: bool
    requires_confirmation: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, method: PaymentMethod) -> "PaymentMethodDTO":
        return cls(
            id=method.id,
            name=method.name,
            description=method.description,
            is_active=method.is_active,
            requires_confirmation=method.requires_confirmation,
            created_at=method.created_at,
            updated_at=method.updated_at,
        )


class DeletePaymentMethodResultDTO(BaseModel):
    method_id: int
    deleted: bool = Field(..., description="Row removed")
    deactivated: bool = Field(..., description="Kept but deactivated because payments reference it")


class InstallmentInputDTO(BaseModel):
    amount: Optional[Any] = Field(default=None, description="Installment amount")
    due_date: Optional[date] = Field(default=None, description="Installment due date")
    notes: Optional[str] = None


class CreatePaymentPlanCommandDTO(BaseModel):
    """
    Command DTO for CreatePaymentPlan

    The installment amounts must add up to the invoice's remaining
    balance.
    """

    invoice_id: int = Field(..., description="Invoice to split")
    name: str = Field(..., description="Plan name")
    description: str = Field(default="")
    total_installments: Optional[int] = Field(
        default=None,
        description="Expected number of installments; must match len(installments) when given"
    )
    installments: List[InstallmentInputDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "name": "3-month plan",
                "installments": [
                    {"amount": "200.00", "due_date": "2025-02-15"},
                    {"amount": "200.00", "due_date": "2025-03-15"},
                    {"amount": "200.00", "due_date": "2025-04-15"}
                ]
            }
        }


class InstallmentDTO(BaseModel):
    id: int
    payment_plan_id: int
    installment_number: int
    amount: Decimal
    due_date: date
    status: str
    payment_id: Optional[int] = None
    reminder_sent: bool
    notes: Optional[str] = None

    @classmethod
    def from_entity(cls, installment: Installment) -> "InstallmentDTO":
        return cls(
            id=installment.id,
            payment_plan_id=installment.payment_plan_id,
            installment_number=installment.installment_number,
            amount=installment.amount,
            due_date=installment.due_date,
            status=getattr(installment.status, "value", installment.status),
            payment_id=installment.payment_id,
            reminder_sent=installment.reminder_sent,
            notes=installment.notes,
        )


class PaymentPlanDTO(BaseModel):
    id: int
    invoice_id: int
    name: str
    description: str
    total_installments: int
    installments_paid: int
    status: str
    installments: List[InstallmentDTO] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, plan: PaymentPlan, installments: Optional[List[Installment]] = None) -> "PaymentPlanDTO":
        return cls(
            id=plan.id,
            invoice_id=plan.invoice_id,
            name=plan.name,
            description=plan.description,
            total_installments=plan.total_installments,
            installments_paid=plan.installments_paid,
            status=getattr(plan.status, "value", plan.status),
            installments=[InstallmentDTO.from_entity(i) for i in (installments or [])],
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )


class InstallmentPaymentResultDTO(BaseModel):
    installment: InstallmentDTO
    plan: PaymentPlanDTO
    payment: PaymentResponseDTO
    invoice: InvoiceBalanceDTO
    notification_failed: bool = False


class InstallmentReminderResultDTO(BaseModel):
    checked: int
    reminders_sent: int
    failed: int
    installment_ids: List[int] = Field(default_factory=list, description="Installments reminded")
