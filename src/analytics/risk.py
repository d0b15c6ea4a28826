from __future__ import annotations

from analytics._calendar import round_half_up
from domain.schemas import FinancialState, RiskSignals

OVERSPEND_WEIGHT = 0.6
DEFICIT_WEIGHT = 0.4


def compute_risk(state: FinancialState, budget: float | None) -> RiskSignals:
    """
    Score how far spending pace is ahead of the calendar.

    overspend_risk: budget-used percent minus month-elapsed percent (never negative)
    deficit_risk:   projected month-end shortfall as a percent of budget
    risk_score:     0.6 * overspend + 0.4 * deficit, capped at 100
    """
    if not budget or budget <= 0:
        return RiskSignals()

    budget_value = float(budget)
    budget_used_percent = state.month_expenses / budget_value * 100
    days_passed_percent = state.day_of_month / state.days_in_month * 100

    overspend = min(100.0, max(0.0, budget_used_percent - days_passed_percent))
    if state.projected_end_balance >= 0:
        deficit = 0.0
    else:
        deficit = min(100.0, abs(state.projected_end_balance) / budget_value * 100)
    score = min(100.0, overspend * OVERSPEND_WEIGHT + deficit * DEFICIT_WEIGHT)

    return RiskSignals(
        overspend_risk=round_half_up(overspend),
        deficit_risk=round_half_up(deficit),
        risk_score=round_half_up(score),
    )
