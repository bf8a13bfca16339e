"""Shared base for domain entities"""

from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# BIGINT on PostgreSQL, INTEGER on SQLite so rowid autoincrement still applies
IdType = BigInteger().with_variant(Integer(), "sqlite")

CENT = Decimal("0.01")


class BaseModel(SQLModel):
    """Base class for all table entities"""


def to_money(value) -> Decimal:
    """Round a numeric value half-up to cents"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
