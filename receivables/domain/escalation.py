"""Overdue Escalation Policy

Pure decision functions for reminders, late fees and aging.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, Union
from receivables.domain.base import to_money
from receivables.domain.overdue import LateFeeType, OverdueConfig, ReminderLog, ReminderTier

AGING_BUCKETS = (
    ("1-30", 1, 30),
    ("31-60", 31, 60),
    ("61-90", 61, 90),
    ("90+", 91, None),
)


@dataclass(frozen=True)
class ReminderDecision:
    """Outcome of should_send_reminder"""

    send: bool
    tier: Optional[ReminderTier] = None
    reason: str = ""


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Whole calendar days from start to end (negative if end is earlier)"""
    return (_as_date(end) - _as_date(start)).days


def days_overdue(due_date: date, today: date) -> int:
    return max(0, days_between(due_date, today))


def should_send_reminder(
    days_overdue: int,
    logs: Sequence[ReminderLog],
    config: OverdueConfig,
    today: date,
) -> ReminderDecision:
    """
    Decide whether the next reminder is due and at which tier

    Tiers never regress: each reminder escalates from the last one
    (gentle -> firm -> urgent) and stays at urgent.

    Args:
        days_overdue: Calendar days past the due date
        logs: Every reminder attempt recorded for the invoice
        config: Current overdue configuration
        today: Current calendar date

    Returns:
        ReminderDecision with send flag and tier
    """
    if len(logs) >= config.max_reminders:
        return ReminderDecision(send=False, reason="max reminders reached")

    if not logs:
        if days_overdue > config.grace_period_days:
            return ReminderDecision(send=True, tier=ReminderTier.GENTLE, reason="first reminder")
        return ReminderDecision(send=False, reason="within grace period")

    last = max(logs, key=lambda log: log.sent_at)
    if days_between(last.sent_at, today) < config.reminder_frequency_days:
        return ReminderDecision(send=False, reason="reminded recently")

    return ReminderDecision(send=True, tier=ReminderTier(last.tier).next(), reason="escalation")


def compute_late_fee(
    total_amount: Decimal,
    config: OverdueConfig,
    amount: Optional[Decimal] = None,
    fee_type: Optional[LateFeeType] = None,
) -> Decimal:
    """
    Late fee in currency, rounded half-up to cents

    An explicit amount/type overrides the configured one. Percentage fees
    are taken from the invoice total.
    """
    fee_type = LateFeeType(fee_type or config.late_fee_type)
    value = Decimal(str(amount)) if amount is not None else Decimal(config.late_fee_amount)

    if fee_type == LateFeeType.PERCENTAGE:
        return to_money(Decimal(total_amount) * value / Decimal(100))
    return to_money(value)


def late_fee_due(
    days_overdue: int,
    last_fee_at: Optional[datetime],
    config: OverdueConfig,
    today: date,
) -> bool:
    """Whether the sweep should apply an automatic late fee"""
    if not config.auto_late_fee:
        return False
    if days_overdue <= config.grace_period_days:
        return False
    if last_fee_at is None:
        return True
    return days_between(last_fee_at, today) > config.late_fee_window_days


def aging_bucket(days: int) -> Optional[str]:
    for label, low, high in AGING_BUCKETS:
        if days >= low and (high is None or days <= high):
            return label
    return None


def render_placeholders(text: str, fields: dict) -> str:
    """Replace {name} placeholders; unknown names are left as-is"""
    result = text
    for key, value in fields.items():
        result = result.replace("{" + key + "}", str(value))
    return result


