from __future__ import annotations

from typing import Iterable

from advisory.base import AdvisoryContext, Intent, IntentHandler
from advisory.registry import register_handler
from analytics._calendar import month_key
from analytics.habits import compute_habit_stats
from analytics.ledger_stats import category_totals
from analytics.portfolio import compute_portfolio_metrics, compute_savings_metrics, summarize_wealth
from analytics.risk import compute_risk
from analytics.state import compute_state
from domain.models import SafetyLevel, Transaction

FOOD_CATEGORY = "Food & Grocery"
SHOPPING_CATEGORY = "Shopping"
SUBSCRIPTION_CATEGORY = "Bill & Subscription"
INVESTMENT_CATEGORY = "Investment"

HELP_TEXT = (
    "I can help you with:\n\n"
    "• 💰 Monthly spending analysis\n"
    "• 📊 Category breakdown\n"
    "• 💡 Budget advice\n"
    "• 🎯 Savings suggestions\n"
    "• 📈 Investment tracking\n"
    "• 🔥 Habit streaks\n\n"
    "Just ask me anything about your finances!"
)


def _month_expenses(transactions: Iterable[Transaction], month: str) -> float:
    return sum(float(txn.amount) for txn in transactions if txn.is_expense and txn.date_iso.startswith(month))


def budget_advice(context: AdvisoryContext) -> str:
    if not context.budget:
        return "💡 Set a monthly budget to get personalized financial advice!"

    ratio = _month_expenses(context.transactions, month_key(context.today)) / float(context.budget)
    if ratio > 1:
        advice = "⚠️ You've exceeded your budget! Consider reviewing your recent expenses and cutting non-essentials."
    elif ratio > 0.8:
        advice = "🟡 You've used over 80% of your budget. Slow down on non-essential spending."
    elif ratio > 0.5:
        advice = "📊 You're at 50% of your budget. You're on track, but keep monitoring."
    else:
        advice = "✅ Your spending is well under control! Great job managing your finances."

    state = compute_state(context.transactions, context.budget, today=context.today)
    if state.safety_level != SafetyLevel.STABLE:
        risks = compute_risk(state, context.budget)
        advice += (
            f"\n\nAt this pace you will finish the month at {context.money(state.projected_end_balance)} "
            f"(risk score {risks.risk_score}/100)."
        )
    return advice


def spending_insight(context: AdvisoryContext) -> str:
    if not context.transactions:
        return "No expenses recorded yet. Start tracking to get insights!"
    totals = category_totals(context.transactions)
    if not totals:
        return "Keep tracking your expenses to get detailed insights!"
    category, amount = totals[0]
    return (
        f"📊 Your biggest spending category is **{category}** with {context.money(amount)}. "
        "Consider if this aligns with your priorities."
    )


def savings_suggestions(context: AdvisoryContext) -> str:
    month = month_key(context.today)
    spent = _month_expenses(context.transactions, month)
    by_category = dict(category_totals(context.transactions, month=month))

    suggestions: list[str] = []
    if by_category.get(FOOD_CATEGORY, 0.0) > spent * 0.3:
        suggestions.append("🍔 Food spending is high (>30%). Try meal planning and cooking at home more often.")
    if by_category.get(SHOPPING_CATEGORY, 0.0) > spent * 0.2:
        suggestions.append("🛍️ Shopping expenses are significant. Consider a 30-day rule before non-essential purchases.")
    if by_category.get(SUBSCRIPTION_CATEGORY, 0.0) > 0:
        suggestions.append("💳 Review your subscriptions. Cancel unused services to save money.")

    if not suggestions:
        return "💰 Your spending looks balanced! Keep up the good work."
    return "\n\n".join(suggestions)


@register_handler
class GreetingHandler(IntentHandler):
    intent = Intent.GREETING
    description = "Introduce the advisor and what it can answer."

    def respond(self, context: AdvisoryContext) -> str:
        return (
            "Hello! 👋 I'm your AI financial advisor. I can help you with:\n\n"
            "• Expense analysis\n• Budget tracking\n• Savings suggestions\n• Spending insights\n\n"
            "What would you like to know?"
        )


@register_handler
class MonthlySpendingHandler(IntentHandler):
    intent = Intent.MONTHLY_SPENDING
    description = "Report this month's expenses and budget usage."

    def respond(self, context: AdvisoryContext) -> str:
        spent = _month_expenses(context.transactions, month_key(context.today))
        if context.budget:
            used = spent / float(context.budget) * 100
            budget_info = f"\n\nYour budget is {context.money(float(context.budget))}. You've used {used:.1f}% of it."
        else:
            budget_info = "\n\nSet a budget for better tracking!"
        return f"💰 You've spent **{context.money(spent)}** this month.{budget_info}"


@register_handler
class CategoryBreakdownHandler(IntentHandler):
    intent = Intent.CATEGORY_BREAKDOWN
    description = "Name the largest spending category."

    def respond(self, context: AdvisoryContext) -> str:
        return spending_insight(context)


@register_handler
class BudgetAdviceHandler(IntentHandler):
    intent = Intent.BUDGET_ADVICE
    description = "Advise on budget usage and month-end projection."

    def respond(self, context: AdvisoryContext) -> str:
        return budget_advice(context)


@register_handler
class SavingsHandler(IntentHandler):
    intent = Intent.SAVINGS
    description = "Suggest savings from this month's category mix."

    def respond(self, context: AdvisoryContext) -> str:
        return savings_suggestions(context)


@register_handler
class InvestmentHandler(IntentHandler):
    intent = Intent.INVESTMENT
    description = "Summarise invested amounts and portfolio health."

    def respond(self, context: AdvisoryContext) -> str:
        invested = sum(float(txn.amount) for txn in context.transactions if txn.category == INVESTMENT_CATEGORY)
        text = f"📈 Your total investment is **{context.money(invested)}**."
        if context.holdings or context.savings_goals:
            portfolio = compute_portfolio_metrics(context.holdings, context.quotes)
            savings = compute_savings_metrics(context.savings_goals)
            wealth = summarize_wealth(portfolio, savings)
            text += (
                f"\n\nTotal wealth: {context.money(wealth.total_wealth)} "
                f"(portfolio {wealth.portfolio_gain:+.2f}%, diversification {wealth.diversification:.0f}/100, "
                f"{wealth.risk_profile.lower()} concentration risk)."
            )
        return text + "\n\nKeep investing regularly for long-term wealth building!"


@register_handler
class TodaySpendingHandler(IntentHandler):
    intent = Intent.TODAY_SPENDING
    description = "Report today's expenses."

    def respond(self, context: AdvisoryContext) -> str:
        today_key = context.today.isoformat()
        spent = sum(float(txn.amount) for txn in context.transactions if txn.is_expense and txn.date_iso == today_key)
        return f"📅 Today you've spent **{context.money(spent)}**."


@register_handler
class HabitProgressHandler(IntentHandler):
    intent = Intent.HABIT_PROGRESS
    description = "Summarise habit streaks and weekly completion."

    def respond(self, context: AdvisoryContext) -> str:
        if not context.habits:
            return "🎯 You haven't added any habits yet. Start with one small daily routine!"
        stats = compute_habit_stats(context.habits, context.habit_log, today=context.today)
        return (
            f"🔥 {stats.active_habits} of {stats.total_habits} habits have an active streak "
            f"(best: {stats.longest_streak} days). You completed {stats.weekly_completion}% this week."
        )


@register_handler
class HelpHandler(IntentHandler):
    intent = Intent.HELP
    description = "List what the advisor can answer."

    def respond(self, context: AdvisoryContext) -> str:
        return HELP_TEXT
