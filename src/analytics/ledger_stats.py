from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Iterable

from analytics._calendar import month_key, resolve_today, round_half_up, weekday_label
from domain.models import Transaction
from domain.schemas import ExpenseSummary, FinanceStats, SpendingTrendPoint

UNLABELLED_CATEGORY = "Miscellaneous"
FALLBACK_KEYWORD_CATEGORY = "Other"

# Checked in order; the first category with a matching keyword wins.
KEYWORD_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Food", ("food", "restaurant", "grocery", "meal", "lunch", "dinner", "breakfast", "cafe", "pizza", "burger")),
    ("Transport", ("uber", "taxi", "bus", "train", "metro", "fuel", "gas", "parking", "transport")),
    ("Shopping", ("amazon", "shopping", "clothes", "shoes", "store", "mall", "purchase")),
    ("Entertainment", ("movie", "netflix", "spotify", "game", "concert", "entertainment", "subscription")),
    ("Bills", ("bill", "electricity", "water", "internet", "phone", "rent", "utility")),
    ("Health", ("medicine", "doctor", "hospital", "pharmacy", "health", "gym", "fitness")),
)


def compute_finance_stats(
    transactions: Iterable[Transaction],
    budget: float | None,
    *,
    today: date | None = None,
    timezone: str | None = None,
) -> FinanceStats:
    today = resolve_today(today, timezone)
    month = month_key(today)
    today_key = today.isoformat()

    total_expenses = total_income = 0.0
    monthly_expenses = monthly_income = 0.0
    today_expenses = 0.0
    month_rows: list[Transaction] = []

    for txn in transactions:
        amount = float(txn.amount)
        in_month = txn.date_iso.startswith(month)
        if txn.is_expense:
            total_expenses += amount
            if in_month:
                monthly_expenses += amount
                month_rows.append(txn)
            if txn.date_iso == today_key:
                today_expenses += amount
        else:
            total_income += amount
            if in_month:
                monthly_income += amount

    budget_remaining = 0.0
    budget_used_percent = 0
    if budget:
        budget_remaining = float(budget) - monthly_expenses
        budget_used_percent = round_half_up(monthly_expenses / float(budget) * 100)

    savings_rate = 0
    if monthly_income > 0:
        savings_rate = round_half_up((monthly_income - monthly_expenses) / monthly_income * 100)

    top_expense = None
    if month_rows:
        top = max(month_rows, key=lambda txn: txn.amount)
        top_expense = ExpenseSummary(
            id=top.id,
            amount=float(top.amount),
            description=top.description,
            category=top.category,
            date_iso=top.date_iso,
        )

    return FinanceStats(
        total_expenses=round(total_expenses, 2),
        total_income=round(total_income, 2),
        monthly_expenses=round(monthly_expenses, 2),
        monthly_income=round(monthly_income, 2),
        today_expenses=round(today_expenses, 2),
        budget_remaining=round(budget_remaining, 2),
        budget_used_percent=budget_used_percent,
        savings_rate=savings_rate,
        avg_daily_spending=round(monthly_expenses / max(today.day, 1), 2),
        top_expense=top_expense,
    )


def categorize_description(description: str) -> str:
    text = (description or "").lower()
    for category, keywords in KEYWORD_CATEGORIES:
        if any(word in text for word in keywords):
            return category
    return FALLBACK_KEYWORD_CATEGORY


def spending_by_keyword_category(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Group expenses by a category guessed from the description text."""
    totals: Counter[str] = Counter()
    for txn in transactions:
        if txn.is_expense:
            totals[categorize_description(txn.description)] += float(txn.amount)
    return {category: round(total, 2) for category, total in totals.items()}


def category_totals(transactions: Iterable[Transaction], *, month: str | None = None) -> list[tuple[str, float]]:
    """Expense totals by category label, largest first; `month` is a YYYY-MM filter."""
    totals: Counter[str] = Counter()
    for txn in transactions:
        if not txn.is_expense:
            continue
        if month and not txn.date_iso.startswith(month):
            continue
        totals[txn.category or UNLABELLED_CATEGORY] += float(txn.amount)
    return [(category, round(total, 2)) for category, total in totals.most_common()]


def spending_trend(
    transactions: Iterable[Transaction],
    *,
    days: int = 7,
    today: date | None = None,
    timezone: str | None = None,
) -> list[SpendingTrendPoint]:
    today = resolve_today(today, timezone)
    daily: Counter[str] = Counter()
    for txn in transactions:
        if txn.is_expense:
            daily[txn.date_iso] += float(txn.amount)

    points: list[SpendingTrendPoint] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(
            SpendingTrendPoint(
                date=day.isoformat(),
                amount=round(daily.get(day.isoformat(), 0.0), 2),
                label=weekday_label(day),
            )
        )
    return points
