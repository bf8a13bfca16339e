"""Client Domain Entity

Minimal client record read by the client directory.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from receivables.domain.base import BaseModel, IdType


class Client(BaseModel, table=True):
    """Client contact record; maintained outside this service"""

    __tablename__ = "clients"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False, index=True),
    )

    email: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
