"""Payment Method Domain Entity

Registry of accepted payment methods.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String, Text
from receivables.domain.base import BaseModel, IdType


class PaymentMethod(BaseModel, table=True):
    """
    Payment Method - How a client paid

    Domain Rules:
    - name is unique
    - Methods referenced by payments are deactivated, never deleted
    - requires_confirmation delays the client receipt until confirmed
    """

    __tablename__ = "payment_methods"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
    )

    description: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
    )

    is_active: bool = Field(default=True)

    requires_confirmation: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)


DEFAULT_PAYMENT_METHODS = [
    {"name": "Credit Card", "description": "Payment via credit or debit card", "requires_confirmation": False},
    {"name": "Bank Transfer", "description": "Direct bank transfer or wire", "requires_confirmation": True},
    {"name": "Cash", "description": "Cash payment in person", "requires_confirmation": True},
    {"name": "Check", "description": "Payment by check", "requires_confirmation": True},
    {"name": "PayPal", "description": "Payment via PayPal", "requires_confirmation": False},
]
