from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable

from analytics._calendar import coerce_date, resolve_today, round_half_up, trailing_dates, weekday_label
from domain.models import HabitLog, HabitRecord
from domain.schemas import HabitStats, HabitTrendPoint, HabitWeekProgress, HeatmapCell

WEEK_DAYS = 7


@dataclass(frozen=True)
class HabitCompletion:
    habit: HabitRecord
    habit_log: dict[str, frozenset[str]]
    changed: bool


def _ids_on(habit_log: HabitLog, day: str) -> frozenset[str]:
    return frozenset(habit_log.get(day) or ())


def _freeze(habit_log: HabitLog) -> dict[str, frozenset[str]]:
    return {day: frozenset(ids) for day, ids in habit_log.items()}


def compute_habit_stats(
    habits: Iterable[HabitRecord],
    habit_log: HabitLog,
    *,
    today: date | None = None,
    timezone: str | None = None,
) -> HabitStats:
    """
    Streak totals plus the share of possible completions over the trailing week.

    The week is the 7 calendar days ending today, whatever weekday today is.
    """
    records = list(habits)
    if not records:
        return HabitStats()

    today = resolve_today(today, timezone)
    streaks = [max(record.streak or 0, 0) for record in records]
    known_ids = {record.id for record in records}

    completed = sum(
        len(_ids_on(habit_log, day) & known_ids)
        for day in trailing_dates(today, WEEK_DAYS)
    )
    possible = len(records) * WEEK_DAYS
    weekly = round_half_up(completed / possible * 100)

    return HabitStats(
        total_habits=len(records),
        active_habits=sum(1 for streak in streaks if streak > 0),
        total_streak=sum(streaks),
        longest_streak=max(streaks),
        weekly_completion=weekly,
        completion_rate=weekly,
    )


def _previous_completion(habit: HabitRecord, habit_log: HabitLog, day: date) -> date | None:
    candidates: list[date] = []
    last = coerce_date(habit.last_completed)
    if last is not None and last < day:
        candidates.append(last)
    for logged_day, ids in habit_log.items():
        parsed = coerce_date(logged_day)
        if parsed is not None and parsed < day and habit.id in ids:
            candidates.append(parsed)
    return max(candidates) if candidates else None


def mark_habit_done(
    habit: HabitRecord,
    habit_log: HabitLog,
    *,
    day: date | None = None,
    timezone: str | None = None,
) -> HabitCompletion:
    """Record a completion for `day`, extending the streak only if yesterday was done too."""
    day = resolve_today(day, timezone)
    day_key = day.isoformat()
    log = _freeze(habit_log)

    if habit.id in log.get(day_key, frozenset()) or habit.last_completed == day_key:
        return HabitCompletion(habit=habit, habit_log=log, changed=False)

    previous = _previous_completion(habit, log, day)
    if previous == day - timedelta(days=1):
        streak = (habit.streak or 0) + 1
    else:
        streak = 1

    log[day_key] = log.get(day_key, frozenset()) | {habit.id}
    updated = replace(habit, streak=streak, last_completed=day_key)
    return HabitCompletion(habit=updated, habit_log=log, changed=True)


def habit_week_progress(
    habit_id: str,
    habit_log: HabitLog,
    *,
    today: date | None = None,
    timezone: str | None = None,
) -> HabitWeekProgress:
    today = resolve_today(today, timezone)
    completed = sum(1 for day in trailing_dates(today, WEEK_DAYS) if habit_id in _ids_on(habit_log, day))
    return HabitWeekProgress(
        habit_id=habit_id,
        completed=completed,
        percent=round_half_up(completed / WEEK_DAYS * 100),
    )


def habit_completion_trend(
    habits: Iterable[HabitRecord],
    habit_log: HabitLog,
    *,
    days: int = WEEK_DAYS,
    today: date | None = None,
    timezone: str | None = None,
) -> list[HabitTrendPoint]:
    today = resolve_today(today, timezone)
    total = len(list(habits))
    points: list[HabitTrendPoint] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        completed = len(_ids_on(habit_log, day.isoformat()))
        points.append(
            HabitTrendPoint(
                date=day.isoformat(),
                completed=completed,
                total=total,
                rate=round_half_up(completed / total * 100) if total else 0,
                label=weekday_label(day),
            )
        )
    return points


def _heat_level(count: int) -> int:
    if count >= 5:
        return 4
    if count >= 3:
        return 3
    return count


def habit_heatmap(
    habit_log: HabitLog,
    *,
    weeks: int = 12,
    today: date | None = None,
    timezone: str | None = None,
) -> list[HeatmapCell]:
    today = resolve_today(today, timezone)
    cells: list[HeatmapCell] = []
    for offset in range(weeks * WEEK_DAYS - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        count = len(_ids_on(habit_log, day))
        cells.append(HeatmapCell(date=day, count=count, level=_heat_level(count)))
    return cells
