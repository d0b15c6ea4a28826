from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models import (
    AlertSeverity,
    AlertType,
    HabitRecord,
    Holding,
    PriceQuote,
    SafetyLevel,
    SavingsGoal,
    Transaction,
    TransactionType,
)


class _Derived(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---- derived records ----

class FinancialState(_Derived):
    balance_left: float = 0.0
    burn_rate_per_day: float = 0.0
    projected_end_balance: float = 0.0
    safety_level: SafetyLevel = SafetyLevel.STABLE
    month_expenses: float = 0.0
    month_income: float = 0.0
    as_of: date
    day_of_month: int = Field(ge=1)
    days_in_month: int = Field(ge=28, le=31)


class RiskSignals(_Derived):
    overspend_risk: int = Field(default=0, ge=0, le=100)
    deficit_risk: int = Field(default=0, ge=0, le=100)
    risk_score: int = Field(default=0, ge=0, le=100)


class BehaviorProfile(_Derived):
    category_spikes: List[str] = Field(default_factory=list)
    impulse_pattern: bool = False
    abnormal_velocity: bool = False
    weekend_spike: bool = False
    late_night_spike: bool = False
    recent_frequency: int = 0

    # diagnostics behind the flags
    category_totals: Dict[str, float] = Field(default_factory=dict)
    impulse_count: int = 0
    today_total: float = 0.0
    average_daily: float = 0.0
    weekend_average: float = 0.0
    weekday_average: float = 0.0
    late_night_count: int = 0


class Alert(_Derived):
    type: AlertType
    title: str
    message: str
    severity: AlertSeverity = AlertSeverity.WARNING


class EvaluationReport(_Derived):
    state: FinancialState
    risks: RiskSignals
    behavior: BehaviorProfile
    alerts: List[Alert] = Field(default_factory=list)


class HabitStats(_Derived):
    total_habits: int = 0
    active_habits: int = 0
    total_streak: int = 0
    longest_streak: int = 0
    weekly_completion: int = 0
    completion_rate: int = 0


class HabitWeekProgress(_Derived):
    habit_id: str
    completed: int
    percent: int


class HabitTrendPoint(_Derived):
    date: str
    completed: int
    total: int
    rate: int
    label: str


class HeatmapCell(_Derived):
    date: str
    count: int
    level: int = Field(ge=0, le=4)


class SpendingTrendPoint(_Derived):
    date: str
    amount: float
    label: str


class ExpenseSummary(_Derived):
    id: str
    amount: float
    description: str = ""
    category: Optional[str] = None
    date_iso: str


class FinanceStats(_Derived):
    total_expenses: float = 0.0
    total_income: float = 0.0
    monthly_expenses: float = 0.0
    monthly_income: float = 0.0
    today_expenses: float = 0.0
    budget_remaining: float = 0.0
    budget_used_percent: int = 0
    savings_rate: int = 0
    avg_daily_spending: float = 0.0
    top_expense: Optional[ExpenseSummary] = None


class Insight(_Derived):
    type: Literal["success", "warning", "danger", "info"]
    icon: str
    message: str


class PortfolioMetrics(_Derived):
    total_value: float = 0.0
    invested_value: float = 0.0
    total_gain: float = 0.0
    gain_percentage: float = 0.0
    daily_gain: float = 0.0
    diversification_score: float = Field(default=100.0, ge=0, le=100)


class SavingsMetrics(_Derived):
    total_saved: float = 0.0
    total_target: float = 0.0
    completion_status: float = 0.0


class WealthSummary(_Derived):
    total_wealth: float
    portfolio_gain: float
    diversification: float
    savings_progress: float
    risk_profile: Literal["High", "Low"]


class AdviceResponse(_Derived):
    intent: str
    text: str
    source: Literal["rules", "llm", "cache"] = "rules"


# ---- ingestion payloads ----

def _coerce_iso_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError as exc:
            raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}") from exc
    return value


class TransactionPayload(BaseModel):
    id: str
    type: TransactionType
    amount: Decimal = Field(ge=0)
    date_iso: str = Field(description="Calendar date in YYYY-MM-DD format, e.g. 2026-01-31.")
    category: Optional[str] = None
    timestamp: Optional[datetime] = None
    description: str = ""

    @field_validator("date_iso", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_iso_date(value)

    def to_model(self) -> Transaction:
        return Transaction(
            id=self.id,
            txn_type=self.type,
            amount=self.amount,
            date_iso=self.date_iso,
            category=self.category or None,
            timestamp=self.timestamp,
            description=self.description,
        )


class HabitPayload(BaseModel):
    id: str
    name: str
    streak: int = Field(default=0, ge=0)
    last_completed: Optional[str] = None

    @field_validator("last_completed", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return _coerce_iso_date(value)

    def to_model(self) -> HabitRecord:
        return HabitRecord(id=self.id, name=self.name, streak=self.streak, last_completed=self.last_completed)


class HoldingPayload(BaseModel):
    symbol: str
    quantity: float = Field(ge=0)
    avg_price: float = Field(ge=0)
    prev_close: Optional[float] = None

    def to_model(self) -> Holding:
        return Holding(symbol=self.symbol, quantity=self.quantity, avg_price=self.avg_price, prev_close=self.prev_close)


class PriceQuotePayload(BaseModel):
    price: float = Field(ge=0)
    prev_close: Optional[float] = None

    def to_model(self) -> PriceQuote:
        return PriceQuote(price=self.price, prev_close=self.prev_close)


class SavingsGoalPayload(BaseModel):
    kind: Literal["sip", "fd", "rd"]
    saved: float = Field(ge=0)
    target: float = Field(ge=0)

    def to_model(self) -> SavingsGoal:
        return SavingsGoal(kind=self.kind, saved=self.saved, target=self.target)


class LedgerSnapshotPayload(BaseModel):
    transactions: List[TransactionPayload] = Field(default_factory=list)
    budget: Optional[float] = Field(default=None, ge=0)
    today: Optional[date] = None

    def to_models(self) -> list[Transaction]:
        return [item.to_model() for item in self.transactions]


class HabitSnapshotPayload(BaseModel):
    habits: List[HabitPayload] = Field(default_factory=list)
    habit_log: Dict[str, List[str]] = Field(default_factory=dict)
    today: Optional[date] = None

    @field_validator("habit_log", mode="before")
    @classmethod
    def coerce_log_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {_coerce_iso_date(key): ids for key, ids in value.items()}

    def to_models(self) -> tuple[list[HabitRecord], dict[str, frozenset[str]]]:
        habits = [item.to_model() for item in self.habits]
        log = {day: frozenset(ids) for day, ids in self.habit_log.items()}
        return habits, log


class AdviceRequest(BaseModel):
    message: str = Field(min_length=1)
    ledger: LedgerSnapshotPayload = Field(default_factory=LedgerSnapshotPayload)
    habits: HabitSnapshotPayload = Field(default_factory=HabitSnapshotPayload)
    holdings: List[HoldingPayload] = Field(default_factory=list)
    quotes: Dict[str, PriceQuotePayload] = Field(default_factory=dict)
    savings_goals: List[SavingsGoalPayload] = Field(default_factory=list)
