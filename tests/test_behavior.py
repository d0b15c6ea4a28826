from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from decimal import Decimal

from analytics.behavior import compute_behavior
from domain.models import Transaction, TransactionType

# Thursday; the trailing week is Fri 2026-09-04 .. Thu 2026-09-10
TODAY = date(2026, 9, 10)
ZONE = "Asia/Kolkata"


def _txn(
    id: str,
    amount: str,
    day: str,
    *,
    category: str | None = None,
    timestamp: datetime | None = None,
    txn_type: TransactionType = TransactionType.EXPENSE,
) -> Transaction:
    return Transaction(
        id=id,
        txn_type=txn_type,
        amount=Decimal(amount),
        date_iso=day,
        category=category,
        timestamp=timestamp,
    )


class BehaviorTests(unittest.TestCase):
    def _profile(self, rows: list[Transaction]):
        return compute_behavior(rows, today=TODAY, timezone=ZONE)

    def test_empty_ledger_has_no_flags(self) -> None:
        profile = self._profile([])

        self.assertEqual(profile.category_spikes, [])
        self.assertFalse(profile.impulse_pattern)
        self.assertFalse(profile.abnormal_velocity)
        self.assertFalse(profile.weekend_spike)
        self.assertFalse(profile.late_night_spike)
        self.assertEqual(profile.recent_frequency, 0)

    def test_category_spike_over_threshold(self) -> None:
        days = ["2026-09-04", "2026-09-05", "2026-09-06", "2026-09-07", "2026-09-08", "2026-09-09"]
        rows = [_txn(f"t{i}", "1000", day, category="Food") for i, day in enumerate(days)]

        profile = self._profile(rows)

        self.assertEqual(profile.category_spikes, ["Food"])
        self.assertEqual(profile.category_totals["Food"], 6000)

    def test_category_under_threshold_is_not_a_spike(self) -> None:
        amounts = ["1000", "1000", "500", "500", "500", "500"]
        rows = [_txn(f"t{i}", amount, "2026-09-08", category="Food") for i, amount in enumerate(amounts)]

        self.assertEqual(self._profile(rows).category_spikes, [])

    def test_category_spike_threshold_is_strict(self) -> None:
        rows = [_txn("t1", "5000", "2026-09-08", category="Rent")]

        self.assertEqual(self._profile(rows).category_spikes, [])

    def test_uncategorized_expenses_do_not_spike(self) -> None:
        rows = [_txn("t1", "9000", "2026-09-08")]

        profile = self._profile(rows)

        self.assertEqual(profile.category_spikes, [])
        self.assertEqual(profile.category_totals, {})

    def test_impulse_pattern_needs_more_than_five_mid_size_purchases(self) -> None:
        five = [_txn(f"t{i}", "150", "2026-09-07") for i in range(5)]
        six = five + [_txn("t6", "999", "2026-09-08")]
        boundaries = six[:5] + [_txn("b1", "100", "2026-09-08"), _txn("b2", "1000", "2026-09-08")]

        self.assertFalse(self._profile(five).impulse_pattern)
        self.assertTrue(self._profile(six).impulse_pattern)
        self.assertFalse(self._profile(boundaries).impulse_pattern)
        self.assertEqual(self._profile(boundaries).impulse_count, 5)

    def test_abnormal_velocity(self) -> None:
        spiky = [_txn("t1", "1500", "2026-09-10")]
        small = [_txn("t1", "900", "2026-09-10")]
        steady = [_txn(f"t{i}", "1500", f"2026-09-{day:02d}") for i, day in enumerate(range(4, 11))]

        self.assertTrue(self._profile(spiky).abnormal_velocity)
        self.assertFalse(self._profile(small).abnormal_velocity)
        self.assertFalse(self._profile(steady).abnormal_velocity)

    def test_weekend_spike(self) -> None:
        rows = [
            _txn("sat", "3000", "2026-09-05"),
            _txn("sun", "3000", "2026-09-06"),
            _txn("mon", "500", "2026-09-07"),
            _txn("tue", "500", "2026-09-08"),
        ]

        profile = self._profile(rows)

        self.assertTrue(profile.weekend_spike)
        self.assertEqual(profile.weekend_average, 3000)
        self.assertEqual(profile.weekday_average, 500)

    def test_weekday_only_spending_never_flags_weekend(self) -> None:
        rows = [_txn(f"t{i}", "4000", day) for i, day in enumerate(["2026-09-07", "2026-09-08", "2026-09-09"])]

        profile = self._profile(rows)

        self.assertFalse(profile.weekend_spike)
        self.assertEqual(profile.weekend_average, 0)

    def test_late_night_needs_two_purchases(self) -> None:
        one = [_txn("t1", "200", "2026-09-09", timestamp=datetime(2026, 9, 9, 23, 15))]
        two = one + [_txn("t2", "200", "2026-09-08", timestamp=datetime(2026, 9, 8, 2, 30))]

        self.assertFalse(self._profile(one).late_night_spike)
        self.assertTrue(self._profile(two).late_night_spike)

    def test_late_night_window_edges(self) -> None:
        rows = [
            _txn("t1", "200", "2026-09-09", timestamp=datetime(2026, 9, 9, 22, 0)),
            _txn("t2", "200", "2026-09-08", timestamp=datetime(2026, 9, 8, 5, 0)),
            _txn("t3", "200", "2026-09-08", timestamp=datetime(2026, 9, 8, 5, 1)),
            _txn("t4", "200", "2026-09-08", timestamp=datetime(2026, 9, 8, 21, 59)),
            _txn("t5", "200", "2026-09-08"),
        ]

        self.assertEqual(self._profile(rows).late_night_count, 2)

    def test_aware_timestamps_are_read_in_local_time(self) -> None:
        # 18:00 UTC is 23:30 in Asia/Kolkata
        rows = [
            _txn("t1", "200", "2026-09-09", timestamp=datetime(2026, 9, 9, 18, 0, tzinfo=timezone.utc)),
            _txn("t2", "200", "2026-09-08", timestamp=datetime(2026, 9, 8, 18, 0, tzinfo=timezone.utc)),
        ]

        self.assertTrue(self._profile(rows).late_night_spike)

    def test_window_excludes_older_expenses_and_income(self) -> None:
        rows = [
            _txn("old", "9000", "2026-09-03", category="Food"),
            _txn("pay", "9000", "2026-09-09", category="Salary", txn_type=TransactionType.INCOME),
            _txn("new", "300", "2026-09-09", category="Food"),
        ]

        profile = self._profile(rows)

        self.assertEqual(profile.recent_frequency, 1)
        self.assertEqual(profile.category_spikes, [])


if __name__ == "__main__":
    unittest.main()
