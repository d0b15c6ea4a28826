from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Collection, Mapping


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class SafetyLevel(str, Enum):
    STABLE = "Stable"
    WARNING = "Warning"
    CRITICAL = "Critical"


class AlertType(str, Enum):
    BUDGET_CRITICAL = "budget_critical"
    BUDGET_WARNING = "budget_warning"
    VELOCITY_SPIKE = "velocity_spike"
    BEHAVIOR_ANOMALY = "behavior_anomaly"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Transaction:
    id: str
    txn_type: TransactionType
    amount: Decimal
    date_iso: str
    category: str | None = None
    timestamp: datetime | None = None
    description: str = ""

    @property
    def is_expense(self) -> bool:
        return self.txn_type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.txn_type == TransactionType.INCOME

    @property
    def posted_on(self) -> date:
        return date.fromisoformat(self.date_iso)


@dataclass(frozen=True)
class HabitRecord:
    id: str
    name: str
    streak: int = 0
    last_completed: str | None = None


# date (YYYY-MM-DD) -> ids of habits completed that day
HabitLog = Mapping[str, Collection[str]]


@dataclass(frozen=True)
class Holding:
    symbol: str
    quantity: float
    avg_price: float
    prev_close: float | None = None


@dataclass(frozen=True)
class PriceQuote:
    price: float
    prev_close: float | None = None


@dataclass(frozen=True)
class SavingsGoal:
    kind: str  # "sip" | "fd" | "rd"
    saved: float
    target: float
