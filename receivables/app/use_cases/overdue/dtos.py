"""Data Transfer Objects for Overdue Escalation Use Cases"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from receivables.domain.invoice import Invoice
from receivables.domain.overdue import OverdueConfig, ReminderTemplate, ReminderLog


class OverdueQueryDTO(BaseModel):
    client_id: Optional[int] = None
    client_name: Optional[str] = Field(default=None, description="Case-insensitive client name fragment")
    min_days_overdue: Optional[int] = Field(default=None, ge=0)


class OverdueInvoiceDTO(BaseModel):
    """Past-due invoice annotated for collection work"""

    invoice_id: int
    invoice_number: str
    client_id: int
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    status: str
    currency: str
    total_amount: Decimal
    amount_paid: Decimal
    remaining_balance: Decimal
    due_date: date
    days_overdue: int
    aging_bucket: Optional[str] = None

    @classmethod
    def from_entity(cls, invoice: Invoice, days_overdue: int, aging_bucket: Optional[str], client=None) -> "OverdueInvoiceDTO":
        return cls(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            client_name=client.name if client else None,
            client_email=client.email if client else None,
            status=getattr(invoice.status, "value", invoice.status),
            currency=invoice.currency,
            total_amount=invoice.total_amount,
            amount_paid=invoice.amount_paid,
            remaining_balance=invoice.remaining_balance,
            due_date=invoice.due_date,
            days_overdue=days_overdue,
            aging_bucket=aging_bucket,
        )


class SendReminderCommandDTO(BaseModel):
    """
    Command DTO for SendReminder

    Without a tier, the template's tier is used, otherwise the tier after
    the last reminder sent (gentle for the first).
    """

    tier: Optional[str] = Field(default=None, description="gentle, firm or urgent")
    template_id: Optional[int] = Field(default=None, description="Explicit reminder template")


class ReminderResultDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    tier: str
    template_id: Optional[int] = None
    success: bool = Field(..., description="Whether the reminder email was delivered")
    error_message: Optional[str] = None
    log_id: int


class ApplyLateFeeCommandDTO(BaseModel):
    """Overrides for ApplyLateFee; configured values are used when omitted"""

    amount: Optional[Any] = Field(default=None, description="Percent or currency amount")
    type: Optional[str] = Field(default=None, description="percentage or fixed")

    class Config:
        json_schema_extra = {"example": {"amount": "5", "type": "percentage"}}


class LateFeeResultDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    fee_amount: Decimal
    fee_type: str
    line_id: int
    total_amount: Decimal
    amount_paid: Decimal
    remaining_balance: Decimal
    status: str


class InvoiceRunErrorDTO(BaseModel):
    invoice_id: int
    error: str


class ProcessOverdueResultDTO(BaseModel):
    """
    Aggregated result of the overdue sweep

    failed counts invoices whose processing raised; failed reminder
    emails are counted in reminders_failed and do not fail the invoice.
    """

    run_date: date
    checked: int = 0
    marked_overdue: int = 0
    reminders_sent: int = 0
    reminders_failed: int = 0
    late_fees_applied: int = 0
    failed: int = 0
    errors: List[InvoiceRunErrorDTO] = Field(default_factory=list)


class AgingBucketDTO(BaseModel):
    count: int = 0
    amount: Decimal = Decimal("0.00")


class OverdueStatisticsDTO(BaseModel):
    total_count: int
    total_amount: Decimal = Field(..., description="Sum of remaining balances")
    average_days_overdue: float
    buckets: Dict[str, AgingBucketDTO]
    generated_at: datetime


class OverdueConfigDTO(BaseModel):
    grace_period_days: int
    reminder_frequency_days: int
    max_reminders: int
    late_fee_type: str
    late_fee_amount: Decimal
    auto_late_fee: bool
    late_fee_window_days: int
    updated_at: datetime

    @classmethod
    def from_entity(cls, config: OverdueConfig) -> "OverdueConfigDTO":
        return cls(
            grace_period_days=config.grace_period_days,
            reminder_frequency_days=config.reminder_frequency_days,
            max_reminders=config.max_reminders,
            late_fee_type=getattr(config.late_fee_type, "value", config.late_fee_type),
            late_fee_amount=config.late_fee_amount,
            auto_late_fee=config.auto_late_fee,
            late_fee_window_days=config.late_fee_window_days,
            updated_at=config.updated_at,
        )


class UpdateOverdueConfigCommandDTO(BaseModel):
    grace_period_days: Optional[int] = None
    reminder_frequency_days: Optional[int] = None
    max_reminders: Optional[int] = None
    late_fee_type: Optional[str] = None
    late_fee_amount: Optional[Any] = None
    auto_late_fee: Optional[bool] = None
    late_fee_window_days: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "grace_period_days": 3,
                "reminder_frequency_days": 7,
                "max_reminders": 3,
                "late_fee_type": "percentage",
                "late_fee_amount": "5.00",
                "auto_late_fee": True
            }
        }


class CreateReminderTemplateCommandDTO(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    tier: Optional[str] = Field(default=None, description="gentle, firm or urgent")
    is_default: bool = False


class UpdateReminderTemplateCommandDTO(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    tier: Optional[str] = None
    is_default: Optional[bool] = None


class ReminderTemplateDTO(BaseModel):
    id: int
    name: str
    subject: str
    body: str
    tier: str
    is_default: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, template: ReminderTemplate) -> "ReminderTemplateDTO":
        return cls(
            id=template.id,
            name=template.name,
            subject=template.subject,
            body=template.body,
            tier=getattr(template.tier, "value", template.tier),
            is_default=template.is_default,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class ReminderLogDTO(BaseModel):
    id: int
    invoice_id: int
    template_id: Optional[int] = None
    tier: str
    sent_at: datetime
    success: bool
    error_message: Optional[str] = None

    @classmethod
    def from_entity(cls, log: ReminderLog) -> "ReminderLogDTO":
        return cls(
            id=log.id,
            invoice_id=log.invoice_id,
            template_id=log.template_id,
            tier=getattr(log.tier, "value", log.tier),
            sent_at=log.sent_at,
            success=log.success,
            error_message=log.error_message,
        )
