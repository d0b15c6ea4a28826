from __future__ import annotations

from datetime import date
from typing import Iterable

from analytics._calendar import days_in_month, month_key, resolve_today
from domain.models import SafetyLevel, Transaction
from domain.schemas import FinancialState

WARNING_RESERVE_RATIO = 0.15


def _month_total(transactions: Iterable[Transaction], month: str, *, income: bool) -> float:
    return sum(
        float(txn.amount)
        for txn in transactions
        if txn.is_income == income and txn.date_iso.startswith(month)
    )


def _safety_level(projected_end_balance: float, budget: float) -> SafetyLevel:
    # No budget is always Stable.
    if budget <= 0:
        return SafetyLevel.STABLE
    if projected_end_balance < 0:
        return SafetyLevel.CRITICAL
    if projected_end_balance < budget * WARNING_RESERVE_RATIO:
        return SafetyLevel.WARNING
    return SafetyLevel.STABLE


def compute_state(
    transactions: Iterable[Transaction],
    budget: float | None,
    *,
    today: date | None = None,
    timezone: str | None = None,
) -> FinancialState:
    """Derive this month's spending position against the budget."""
    today = resolve_today(today, timezone)
    rows = list(transactions)
    month = month_key(today)
    day = max(today.day, 1)
    month_length = days_in_month(today)
    budget_value = float(budget or 0)

    month_expenses = _month_total(rows, month, income=False)
    month_income = _month_total(rows, month, income=True)

    burn_rate = month_expenses / day
    projected = budget_value - burn_rate * month_length

    return FinancialState(
        balance_left=budget_value - month_expenses,
        burn_rate_per_day=burn_rate,
        projected_end_balance=projected,
        safety_level=_safety_level(projected, budget_value),
        month_expenses=month_expenses,
        month_income=month_income,
        as_of=today,
        day_of_month=day,
        days_in_month=month_length,
    )
