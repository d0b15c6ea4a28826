from analytics.alerts import compute_alerts
from analytics.behavior import compute_behavior
from analytics.habits import (
    compute_habit_stats,
    habit_completion_trend,
    habit_heatmap,
    habit_week_progress,
    mark_habit_done,
)
from analytics.insights import generate_insights
from analytics.ledger_stats import (
    categorize_description,
    category_totals,
    compute_finance_stats,
    spending_by_keyword_category,
    spending_trend,
)
from analytics.portfolio import compute_portfolio_metrics, compute_savings_metrics, summarize_wealth
from analytics.risk import compute_risk
from analytics.state import compute_state

__all__ = [
    "categorize_description",
    "category_totals",
    "compute_alerts",
    "compute_behavior",
    "compute_finance_stats",
    "compute_habit_stats",
    "compute_portfolio_metrics",
    "compute_risk",
    "compute_savings_metrics",
    "compute_state",
    "generate_insights",
    "habit_completion_trend",
    "habit_heatmap",
    "habit_week_progress",
    "mark_habit_done",
    "spending_by_keyword_category",
    "spending_trend",
    "summarize_wealth",
]
