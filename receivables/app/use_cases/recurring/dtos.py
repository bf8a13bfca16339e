"""Data Transfer Objects for Recurring Invoice Use Cases"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from receivables.domain.recurring_template import (
    RecurringInvoiceTemplate,
    RecurringTemplateItem,
    RecurringInvoiceHistory,
)


class RecurringItemDTO(BaseModel):
    """Template line item input, validated by the use case"""

    description: Optional[str] = None
    quantity: Optional[Any] = None
    unit_price: Optional[Any] = None
    tax_rate: Optional[Any] = 0


class CreateRecurringTemplateCommandDTO(BaseModel):
    """
    Command DTO for creating a recurring template

    frequency is one of daily, weekly, monthly, quarterly, yearly.
    """

    client_id: Optional[int] = Field(default=None, description="Client to bill (required)")
    title: Optional[str] = Field(default=None, description="Title of generated invoices (required)")
    description: str = Field(default="")
    frequency: Optional[str] = Field(default=None, description="Recurrence period (required)")
    interval: Optional[int] = Field(default=1, description="Periods between generations, >= 1")
    next_date: Optional[date] = Field(default=None, description="First generation date (required)")
    end_date: Optional[date] = Field(default=None, description="Last allowed generation date")
    due_days: Optional[int] = Field(default=14, description="Days from generation to due date")
    auto_send: bool = Field(default=True, description="Send generated invoices automatically")
    items: List[RecurringItemDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 1,
                "title": "Monthly retainer",
                "frequency": "monthly",
                "interval": 1,
                "next_date": "2025-01-31",
                "due_days": 14,
                "auto_send": True,
                "items": [{"description": "Retainer", "quantity": "1", "unit_price": "1500.00"}]
            }
        }


class UpdateRecurringTemplateCommandDTO(BaseModel):
    """Partial update; supplying items replaces the item set"""

    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[str] = None
    interval: Optional[int] = None
    next_date: Optional[date] = None
    end_date: Optional[date] = None
    clear_end_date: bool = Field(default=False, description="Remove the end date")
    due_days: Optional[int] = None
    auto_send: Optional[bool] = None
    items: Optional[List[RecurringItemDTO]] = None


class RecurringQueryDTO(BaseModel):
    client_id: Optional[int] = None
    status: Optional[str] = None
    frequency: Optional[str] = None


class RecurringItemResponseDTO(BaseModel):
    id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    position: int

    @classmethod
    def from_entity(cls, item: RecurringTemplateItem) -> "RecurringItemResponseDTO":
        return cls(
            id=item.id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            position=item.position,
        )


class RecurringHistoryDTO(BaseModel):
    id: int
    invoice_id: int
    scheduled_date: date
    generated_at: datetime

    @classmethod
    def from_entity(cls, history: RecurringInvoiceHistory) -> "RecurringHistoryDTO":
        return cls(
            id=history.id,
            invoice_id=history.invoice_id,
            scheduled_date=history.scheduled_date,
            generated_at=history.generated_at,
        )


class RecurringTemplateDTO(BaseModel):
    id: int
    client_id: int
    title: str
    description: str
    frequency: str
    interval: int
    next_date: date
    end_date: Optional[date] = None
    due_days: int
    auto_send: bool
    status: str
    items: List[RecurringItemResponseDTO] = Field(default_factory=list)
    history: List[RecurringHistoryDTO] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls,
        template: RecurringInvoiceTemplate,
        items: Optional[List[RecurringTemplateItem]] = None,
        history: Optional[List[RecurringInvoiceHistory]] = None,
    ) -> "RecurringTemplateDTO":
        return cls(
            id=template.id,
            client_id=template.client_id,
            title=template.title,
            description=template.description,
            frequency=getattr(template.frequency, "value", template.frequency),
            interval=template.interval,
            next_date=template.next_date,
            end_date=template.end_date,
            due_days=template.due_days,
            auto_send=template.auto_send,
            status=getattr(template.status, "value", template.status),
            items=[RecurringItemResponseDTO.from_entity(i) for i in (items or [])],
            history=[RecurringHistoryDTO.from_entity(h) for h in (history or [])],
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class DeleteRecurringTemplateResultDTO(BaseModel):
    template_id: int
    deleted: bool = True


class GenerateInvoiceResultDTO(BaseModel):
    """Result of generating one invoice from a template"""

    template_id: int
    invoice_id: int
    invoice_number: str
    total_amount: Decimal
    due_date: date
    next_date: date = Field(..., description="Template next_date after advancing")
    template_status: str
    email_sent: bool = False
    notification_failed: bool = False


class TemplateRunDTO(BaseModel):
    template_id: int
    success: bool
    invoice_id: Optional[int] = None
    invoice_number: Optional[str] = None
    error: Optional[str] = None


class ProcessDueResultDTO(BaseModel):
    """
    Result of the recurring sweep

    processed counts due templates; failures are listed in results.
    """

    run_date: date
    processed: int
    succeeded: int
    failed: int
    results: List[TemplateRunDTO] = Field(default_factory=list)
