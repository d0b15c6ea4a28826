from __future__ import annotations

from domain.schemas import FinanceStats, HabitStats, Insight
from infrastructure.settings import DEFAULT_CURRENCY_SYMBOL


def generate_insights(
    habit_stats: HabitStats,
    finance_stats: FinanceStats,
    *,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> list[Insight]:
    insights: list[Insight] = []

    if habit_stats.longest_streak >= 7:
        insights.append(
            Insight(type="success", icon="🔥", message=f"Amazing! Your longest streak is {habit_stats.longest_streak} days!")
        )

    if habit_stats.weekly_completion >= 80:
        insights.append(
            Insight(
                type="success",
                icon="⭐",
                message=f"Excellent consistency! {habit_stats.weekly_completion}% completion this week.",
            )
        )
    elif habit_stats.weekly_completion < 50 and habit_stats.total_habits > 0:
        insights.append(
            Insight(
                type="warning",
                icon="💪",
                message=f"You can do better! Only {habit_stats.weekly_completion}% completion this week.",
            )
        )

    used = finance_stats.budget_used_percent
    if used > 90:
        insights.append(
            Insight(type="danger", icon="⚠️", message=f"Budget alert! You've used {used}% of your monthly budget.")
        )
    elif 0 < used <= 70:
        insights.append(Insight(type="success", icon="💰", message=f"Great job! You're at {used}% of your budget."))

    if finance_stats.savings_rate > 20:
        insights.append(
            Insight(type="success", icon="📈", message=f"Impressive {finance_stats.savings_rate}% savings rate this month!")
        )

    top = finance_stats.top_expense
    if top is not None and top.amount > 1000:
        label = top.description or top.category or "an expense"
        insights.append(
            Insight(type="info", icon="💸", message=f"Biggest expense: {currency_symbol}{top.amount:.2f} on {label}")
        )

    return insights
