from __future__ import annotations

import unittest
from datetime import date

from analytics.habits import (
    compute_habit_stats,
    habit_completion_trend,
    habit_heatmap,
    habit_week_progress,
    mark_habit_done,
)
from domain.models import HabitRecord

THURSDAY = date(2026, 9, 10)
WEDNESDAY = date(2026, 9, 9)
SUNDAY = date(2026, 9, 13)


def _week_of(habit_id: str, days: range) -> dict[str, list[str]]:
    return {f"2026-09-{day:02d}": [habit_id] for day in days}


class MarkHabitDoneTests(unittest.TestCase):
    def test_streak_extends_when_yesterday_was_done(self) -> None:
        habit = HabitRecord(id="h1", name="Run", streak=5, last_completed="2026-09-09")

        first = mark_habit_done(habit, {}, day=THURSDAY)
        second = mark_habit_done(first.habit, first.habit_log, day=THURSDAY)

        self.assertTrue(first.changed)
        self.assertEqual(first.habit.streak, 6)
        self.assertEqual(first.habit.last_completed, "2026-09-10")
        self.assertIn("h1", first.habit_log["2026-09-10"])
        self.assertFalse(second.changed)
        self.assertEqual(second.habit.streak, 6)

    def test_gap_resets_streak_to_one(self) -> None:
        habit = HabitRecord(id="h1", name="Run", streak=9, last_completed="2026-09-07")

        result = mark_habit_done(habit, {}, day=THURSDAY)

        self.assertEqual(result.habit.streak, 1)

    def test_previous_completion_can_come_from_the_log(self) -> None:
        habit = HabitRecord(id="h1", name="Run", streak=2)

        result = mark_habit_done(habit, {"2026-09-09": ["h1", "h2"]}, day=THURSDAY)

        self.assertEqual(result.habit.streak, 3)

    def test_input_log_is_not_mutated(self) -> None:
        habit = HabitRecord(id="h1", name="Run")
        log = {"2026-09-10": ["h2"]}

        result = mark_habit_done(habit, log, day=THURSDAY)

        self.assertEqual(log, {"2026-09-10": ["h2"]})
        self.assertEqual(result.habit_log["2026-09-10"], frozenset({"h1", "h2"}))

    def test_already_logged_today_is_a_no_op(self) -> None:
        habit = HabitRecord(id="h1", name="Run", streak=4, last_completed="2026-09-09")

        result = mark_habit_done(habit, {"2026-09-10": ["h1"]}, day=THURSDAY)

        self.assertFalse(result.changed)
        self.assertEqual(result.habit.streak, 4)


class HabitStatsTests(unittest.TestCase):
    def test_no_habits_gives_zero_stats(self) -> None:
        stats = compute_habit_stats([], {}, today=THURSDAY)

        self.assertEqual(stats.total_habits, 0)
        self.assertEqual(stats.weekly_completion, 0)

    def test_streak_totals_and_weekly_completion(self) -> None:
        habits = [
            HabitRecord(id="h1", name="Run", streak=4),
            HabitRecord(id="h2", name="Read", streak=0),
            HabitRecord(id="h3", name="Meditate", streak=10),
        ]
        log = _week_of("h1", range(4, 11))
        log["2026-09-10"] = ["h1", "h3", "deleted-habit"]

        stats = compute_habit_stats(habits, log, today=THURSDAY)

        self.assertEqual(stats.total_habits, 3)
        self.assertEqual(stats.active_habits, 2)
        self.assertEqual(stats.total_streak, 14)
        self.assertEqual(stats.longest_streak, 10)
        # 8 of 21 possible completions; unknown ids are ignored
        self.assertEqual(stats.weekly_completion, 38)
        self.assertEqual(stats.completion_rate, stats.weekly_completion)

    def test_week_ending_on_a_sunday_is_the_trailing_seven_days(self) -> None:
        habits = [HabitRecord(id="h1", name="Run")]

        stats = compute_habit_stats(habits, _week_of("h1", range(7, 14)), today=SUNDAY)

        self.assertEqual(stats.weekly_completion, 100)

    def test_week_ending_on_a_wednesday_reaches_into_the_previous_calendar_week(self) -> None:
        habits = [HabitRecord(id="h1", name="Run")]

        stats = compute_habit_stats(habits, {"2026-09-03": ["h1"]}, today=WEDNESDAY)

        self.assertEqual(stats.weekly_completion, 14)

    def test_week_progress_matches_stats_window(self) -> None:
        log = _week_of("h1", range(8, 11))

        progress = habit_week_progress("h1", log, today=THURSDAY)

        self.assertEqual(progress.completed, 3)
        self.assertEqual(progress.percent, 43)


class HabitChartTests(unittest.TestCase):
    def test_completion_trend_is_oldest_first(self) -> None:
        habits = [HabitRecord(id="h1", name="Run"), HabitRecord(id="h2", name="Read")]

        points = habit_completion_trend(habits, {"2026-09-10": ["h1"]}, today=THURSDAY)

        self.assertEqual(len(points), 7)
        self.assertEqual((points[0].date, points[0].label), ("2026-09-04", "Fri"))
        self.assertEqual((points[-1].date, points[-1].label), ("2026-09-10", "Thu"))
        self.assertEqual(points[-1].rate, 50)
        self.assertEqual(points[0].rate, 0)

    def test_completion_trend_without_habits(self) -> None:
        points = habit_completion_trend([], {}, days=3, today=THURSDAY)

        self.assertEqual([p.rate for p in points], [0, 0, 0])

    def test_heatmap_levels(self) -> None:
        log = {f"2026-09-{4 + count:02d}": [f"h{i}" for i in range(count)] for count in range(7)}

        cells = habit_heatmap(log, weeks=1, today=THURSDAY)

        self.assertEqual([c.count for c in cells], [0, 1, 2, 3, 4, 5, 6])
        self.assertEqual([c.level for c in cells], [0, 1, 2, 3, 3, 4, 4])

    def test_heatmap_default_covers_twelve_weeks(self) -> None:
        cells = habit_heatmap({}, today=THURSDAY)

        self.assertEqual(len(cells), 84)
        self.assertEqual(cells[-1].date, "2026-09-10")


if __name__ == "__main__":
    unittest.main()
