from __future__ import annotations

from datetime import date, time
from typing import Iterable

from analytics._calendar import local_time_of, resolve_today, safe_div, trailing_dates
from domain.models import Transaction
from domain.schemas import BehaviorProfile

WINDOW_DAYS = 7

CATEGORY_SPIKE_THRESHOLD = 5000.0

IMPULSE_MIN_AMOUNT = 100.0
IMPULSE_MAX_AMOUNT = 1000.0
IMPULSE_COUNT_THRESHOLD = 5

VELOCITY_MULTIPLIER = 2.0
VELOCITY_FLOOR = 1000.0

WEEKEND_MULTIPLIER = 1.5
WEEKEND_FLOOR = 2000.0

LATE_NIGHT_START = time(22, 0)
LATE_NIGHT_END = time(5, 0)
LATE_NIGHT_COUNT_THRESHOLD = 2


def _category_totals(expenses: list[Transaction]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for txn in expenses:
        if not txn.category:
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + float(txn.amount)
    return totals


def _is_late_night(txn: Transaction, timezone: str | None) -> bool:
    if txn.timestamp is None:
        return False
    clock = local_time_of(txn.timestamp, timezone)
    return clock >= LATE_NIGHT_START or clock <= LATE_NIGHT_END


def _is_weekend(txn: Transaction) -> bool:
    return txn.posted_on.weekday() >= 5


def compute_behavior(
    transactions: Iterable[Transaction],
    *,
    today: date | None = None,
    timezone: str | None = None,
) -> BehaviorProfile:
    """Scan the trailing week of expenses for spending-pattern anomalies."""
    today = resolve_today(today, timezone)
    window = trailing_dates(today, WINDOW_DAYS)
    window_set = set(window)
    recent = [txn for txn in transactions if txn.is_expense and txn.date_iso in window_set]

    # 1. category spikes
    totals = _category_totals(recent)
    spikes = [category for category, total in totals.items() if total > CATEGORY_SPIKE_THRESHOLD]

    # 2. impulse buying
    impulse_count = sum(1 for txn in recent if IMPULSE_MIN_AMOUNT < float(txn.amount) < IMPULSE_MAX_AMOUNT)

    # 3. velocity: today vs the week's daily average
    today_total = sum(float(txn.amount) for txn in recent if txn.date_iso == window[0])
    average_daily = sum(float(txn.amount) for txn in recent) / WINDOW_DAYS
    abnormal_velocity = today_total > average_daily * VELOCITY_MULTIPLIER and today_total > VELOCITY_FLOOR

    # 4. weekend vs weekday mean per transaction
    weekend = [float(txn.amount) for txn in recent if _is_weekend(txn)]
    weekday = [float(txn.amount) for txn in recent if not _is_weekend(txn)]
    weekend_average = safe_div(sum(weekend), len(weekend))
    weekday_average = safe_div(sum(weekday), len(weekday))
    weekend_spike = weekend_average > weekday_average * WEEKEND_MULTIPLIER and weekend_average > WEEKEND_FLOOR

    # 5. late-night purchases
    late_night_count = sum(1 for txn in recent if _is_late_night(txn, timezone))

    return BehaviorProfile(
        category_spikes=spikes,
        impulse_pattern=impulse_count > IMPULSE_COUNT_THRESHOLD,
        abnormal_velocity=abnormal_velocity,
        weekend_spike=weekend_spike,
        late_night_spike=late_night_count >= LATE_NIGHT_COUNT_THRESHOLD,
        recent_frequency=len(recent),
        category_totals={category: round(total, 2) for category, total in totals.items()},
        impulse_count=impulse_count,
        today_total=round(today_total, 2),
        average_daily=round(average_daily, 2),
        weekend_average=round(weekend_average, 2),
        weekday_average=round(weekday_average, 2),
        late_night_count=late_night_count,
    )
