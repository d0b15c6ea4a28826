from __future__ import annotations

from datetime import date
from typing import Iterable

from analytics._calendar import resolve_today, round_half_up
from analytics.behavior import compute_behavior
from analytics.risk import compute_risk
from analytics.state import compute_state
from domain.models import AlertSeverity, AlertType, Transaction
from domain.schemas import Alert, BehaviorProfile, FinancialState, RiskSignals

BUDGET_CRITICAL_UTILIZATION = 0.9
BUDGET_WARNING_UTILIZATION = 0.75
OVERSPEND_ALERT_THRESHOLD = 40


def _budget_alert(state: FinancialState, budget: float | None) -> Alert | None:
    if not budget or budget <= 0:
        return None
    utilization = state.month_expenses / float(budget)
    percent = round_half_up(utilization * 100)
    if utilization >= BUDGET_CRITICAL_UTILIZATION:
        return Alert(
            type=AlertType.BUDGET_CRITICAL,
            title="🛑 Critical Budget Alert",
            message=f"You have exhausted {percent}% of your monthly budget!",
            severity=AlertSeverity.CRITICAL,
        )
    if utilization >= BUDGET_WARNING_UTILIZATION:
        return Alert(
            type=AlertType.BUDGET_WARNING,
            title="⚠️ Budget Warning",
            message=f"You have used {percent}% of your budget.",
            severity=AlertSeverity.WARNING,
        )
    return None


def compute_alerts(
    transactions: Iterable[Transaction],
    budget: float | None,
    *,
    today: date | None = None,
    timezone: str | None = None,
    state: FinancialState | None = None,
    risks: RiskSignals | None = None,
    behavior: BehaviorProfile | None = None,
) -> list[Alert]:
    """
    Turn state, risk and behavior signals into user-facing alerts.

    Rules run in a fixed order and each adds at most one alert. Nothing is
    suppressed here; repeat notifications are filtered by the delivery side.
    """
    rows = list(transactions)
    today = resolve_today(today, timezone)
    state = state or compute_state(rows, budget, today=today)
    risks = risks or compute_risk(state, budget)
    behavior = behavior or compute_behavior(rows, today=today, timezone=timezone)

    alerts: list[Alert] = []

    budget_alert = _budget_alert(state, budget)
    if budget_alert is not None:
        alerts.append(budget_alert)

    if risks.overspend_risk > OVERSPEND_ALERT_THRESHOLD:
        alerts.append(
            Alert(
                type=AlertType.VELOCITY_SPIKE,
                title="⚡ Spending Spike",
                message="Your spending velocity is significantly higher than usual for this time of month.",
                severity=AlertSeverity.WARNING,
            )
        )

    if behavior.late_night_spike:
        alerts.append(
            Alert(
                type=AlertType.BEHAVIOR_ANOMALY,
                title="🌙 Late Night Spending",
                message="We noticed multiple late-night transactions. Consider setting a curfew for shopping apps!",
                severity=AlertSeverity.INFO,
            )
        )

    if behavior.abnormal_velocity:
        alerts.append(
            Alert(
                type=AlertType.VELOCITY_SPIKE,
                title="📈 Unusual Activity",
                message="Your spending today is more than double your daily average.",
                severity=AlertSeverity.WARNING,
            )
        )

    return alerts
