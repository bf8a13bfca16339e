"""Recurring schedule arithmetic

Calendar-aware period stepping for recurring templates.
"""

from datetime import date
from typing import Optional
from dateutil.relativedelta import relativedelta
from receivables.domain.recurring_template import Frequency


def period_delta(frequency: Frequency, interval: int = 1) -> relativedelta:
    """
    One period of the given frequency as a relativedelta

    Months and years are calendar steps, so 2025-01-31 plus one month is
    2025-02-28 rather than an invalid or rolled-over date.
    """
    if interval < 1:
        raise ValueError("interval must be >= 1")

    if frequency == Frequency.DAILY:
        return relativedelta(days=interval)
    if frequency == Frequency.WEEKLY:
        return relativedelta(weeks=interval)
    if frequency == Frequency.MONTHLY:
        return relativedelta(months=interval)
    if frequency == Frequency.QUARTERLY:
        return relativedelta(months=3 * interval)
    if frequency == Frequency.YEARLY:
        return relativedelta(years=interval)
    raise ValueError(f"Unsupported frequency: {frequency}")


def next_occurrence(
    current: date, frequency: Frequency, interval: int = 1, anchor_day: Optional[int] = None
) -> date:
    """
    Date of the generation following ``current``

    Calendar steps go back to ``anchor_day`` when the month allows it, so a
    schedule anchored on the 31st runs 01-31, 02-28, 03-31 instead of
    sticking to the 28th after February.

    Args:
        current: Date the last generation was due on
        frequency: Template frequency
        interval: Number of periods to advance
        anchor_day: Day of month the schedule started on, defaults to current.day

    Returns:
        The next generation date
    """
    delta = period_delta(frequency, interval)
    if frequency in (Frequency.MONTHLY, Frequency.QUARTERLY, Frequency.YEARLY):
        delta += relativedelta(day=anchor_day or current.day)
    return current + delta


def is_past_end(next_date: date, end_date) -> bool:
    return end_date is not None and next_date > end_date
