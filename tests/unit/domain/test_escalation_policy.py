"""Unit tests for the overdue escalation policy"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from receivables.domain.escalation import (
    aging_bucket,
    compute_late_fee,
    days_between,
    days_overdue,
    late_fee_due,
    render_placeholders,
    should_send_reminder,
)
from receivables.domain.overdue import LateFeeType, OverdueConfig, ReminderLog, ReminderTier

TODAY = date(2025, 3, 1)


def _config(**overrides) -> OverdueConfig:
    values = dict(
        grace_period_days=3,
        reminder_frequency_days=7,
        max_reminders=3,
        late_fee_type=LateFeeType.PERCENTAGE,
        late_fee_amount=Decimal("5.00"),
        auto_late_fee=True,
        late_fee_window_days=30,
    )
    values.update(overrides)
    return OverdueConfig(**values)


def _log(tier: ReminderTier, days_ago: int) -> ReminderLog:
    return ReminderLog(
        invoice_id=1,
        tier=tier,
        sent_at=datetime.combine(TODAY - timedelta(days=days_ago), datetime.min.time()),
        success=True,
    )


class TestDays:

    def test_days_between_dates_and_datetimes(self):
        assert days_between(date(2025, 2, 24), TODAY) == 5
        assert days_between(datetime(2025, 2, 24, 23, 59), TODAY) == 5
        assert days_between(TODAY, date(2025, 2, 24)) == -5

    def test_days_overdue_never_negative(self):
        assert days_overdue(date(2025, 3, 10), TODAY) == 0
        assert days_overdue(date(2025, 2, 24), TODAY) == 5


class TestShouldSendReminder:

    def test_first_reminder_after_grace_is_gentle(self):
        """grace_period_days=3, days_overdue=5, no prior reminders -> gentle"""
        decision = should_send_reminder(5, [], _config(), TODAY)

        assert decision.send is True
        assert decision.tier == ReminderTier.GENTLE

    def test_within_grace_period(self):
        assert should_send_reminder(3, [], _config(), TODAY).send is False

    def test_reminded_recently(self):
        decision = should_send_reminder(20, [_log(ReminderTier.GENTLE, 6)], _config(), TODAY)

        assert decision.send is False

    def test_escalates_after_frequency_window(self):
        decision = should_send_reminder(20, [_log(ReminderTier.GENTLE, 7)], _config(), TODAY)

        assert decision.send is True
        assert decision.tier == ReminderTier.FIRM

    def test_escalation_uses_latest_log(self):
        logs = [_log(ReminderTier.FIRM, 8), _log(ReminderTier.GENTLE, 16)]

        decision = should_send_reminder(30, logs, _config(), TODAY)

        assert decision.tier == ReminderTier.URGENT

    def test_urgent_stays_urgent(self):
        logs = [_log(ReminderTier.URGENT, 10)]

        decision = should_send_reminder(40, logs, _config(max_reminders=5), TODAY)

        assert decision.send is True
        assert decision.tier == ReminderTier.URGENT

    def test_stops_at_max_reminders(self):
        logs = [
            _log(ReminderTier.URGENT, 10),
            _log(ReminderTier.FIRM, 20),
            _log(ReminderTier.GENTLE, 30),
        ]

        decision = should_send_reminder(60, logs, _config(max_reminders=3), TODAY)

        assert decision.send is False

    def test_zero_max_reminders_never_sends(self):
        assert should_send_reminder(30, [], _config(max_reminders=0), TODAY).send is False

    def test_tiers_never_regress_over_a_sequence(self):
        """Simulated daily evaluation produces a non-decreasing tier sequence"""
        config = _config(max_reminders=5)
        logs = []
        tiers = []
        for day in range(60):
            today = date(2025, 1, 1) + timedelta(days=day)
            decision = should_send_reminder(day, logs, config, today)
            if decision.send:
                tiers.append(decision.tier)
                logs.append(
                    ReminderLog(
                        invoice_id=1,
                        tier=decision.tier,
                        sent_at=datetime.combine(today, datetime.min.time()),
                    )
                )

        assert len(tiers) == 5
        assert [t.rank for t in tiers] == sorted(t.rank for t in tiers)
        assert tiers[:3] == [ReminderTier.GENTLE, ReminderTier.FIRM, ReminderTier.URGENT]


class TestLateFees:

    def test_percentage_of_total(self):
        assert compute_late_fee(Decimal("1000.00"), _config()) == Decimal("50.00")

    def test_percentage_rounds_half_up(self):
        fee = compute_late_fee(Decimal("333.33"), _config(late_fee_amount=Decimal("1.50")))

        # 333.33 * 1.5% = 4.99995
        assert fee == Decimal("5.00")

    def test_fixed_fee(self):
        config = _config(late_fee_type=LateFeeType.FIXED, late_fee_amount=Decimal("25.00"))

        assert compute_late_fee(Decimal("1000.00"), config) == Decimal("25.00")

    def test_explicit_override(self):
        fee = compute_late_fee(Decimal("1000.00"), _config(), amount=Decimal("12.345"), fee_type=LateFeeType.FIXED)

        assert fee == Decimal("12.35")

    def test_fee_due_after_grace(self):
        assert late_fee_due(5, None, _config(), TODAY) is True

    def test_fee_not_due_within_grace(self):
        assert late_fee_due(3, None, _config(), TODAY) is False

    def test_fee_not_due_when_auto_disabled(self):
        assert late_fee_due(40, None, _config(auto_late_fee=False), TODAY) is False

    def test_fee_not_repeated_within_window(self):
        last_fee = datetime(2025, 2, 1, 9, 0)

        assert late_fee_due(40, last_fee, _config(), TODAY) is False

    def test_fee_repeated_after_window(self):
        last_fee = datetime(2025, 1, 20, 9, 0)

        assert late_fee_due(60, last_fee, _config(), TODAY) is True


class TestAgingAndRendering:

    @pytest.mark.parametrize("days,bucket", [
        (0, None),
        (1, "1-30"),
        (30, "1-30"),
        (31, "31-60"),
        (61, "61-90"),
        (90, "61-90"),
        (91, "90+"),
        (400, "90+"),
    ])
    def test_aging_bucket(self, days, bucket):
        assert aging_bucket(days) == bucket

    def test_render_placeholders(self):
        text = render_placeholders(
            "Invoice #{invoice_number} is {days_overdue} days late, {unknown}",
            {"invoice_number": "INV-1", "days_overdue": 5},
        )

        assert text == "Invoice #INV-1 is 5 days late, {unknown}"
