from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping

from domain.models import HabitLog, HabitRecord, Holding, PriceQuote, SavingsGoal, Transaction
from infrastructure.settings import DEFAULT_CURRENCY_SYMBOL


class Intent(str, Enum):
    GREETING = "greeting"
    MONTHLY_SPENDING = "monthly_spending"
    CATEGORY_BREAKDOWN = "category_breakdown"
    BUDGET_ADVICE = "budget_advice"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    TODAY_SPENDING = "today_spending"
    HABIT_PROGRESS = "habit_progress"
    HELP = "help"


@dataclass(frozen=True)
class AdvisoryContext:
    """Snapshot a handler answers from. Handlers never mutate it."""

    today: date
    transactions: tuple[Transaction, ...] = ()
    budget: float | None = None
    habits: tuple[HabitRecord, ...] = ()
    habit_log: HabitLog = field(default_factory=dict)
    holdings: tuple[Holding, ...] = ()
    quotes: Mapping[str, PriceQuote | float] = field(default_factory=dict)
    savings_goals: tuple[SavingsGoal, ...] = ()
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL

    def money(self, amount: float) -> str:
        return f"{self.currency_symbol}{amount:,.2f}"


class IntentHandler(ABC):
    intent: Intent
    description: str = ""

    @abstractmethod
    def respond(self, context: AdvisoryContext) -> str:
        raise NotImplementedError
