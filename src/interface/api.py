from __future__ import annotations

from datetime import date
from typing import List, Union

from fastapi import FastAPI

from advisory.base import AdvisoryContext
from analytics._calendar import resolve_today
from analytics.alerts import compute_alerts
from analytics.behavior import compute_behavior
from analytics.habits import compute_habit_stats, habit_completion_trend
from analytics.ledger_stats import compute_finance_stats
from analytics.risk import compute_risk
from analytics.state import compute_state
from domain.schemas import (
    AdviceRequest,
    AdviceResponse,
    Alert,
    BehaviorProfile,
    EvaluationReport,
    FinanceStats,
    FinancialState,
    HabitSnapshotPayload,
    HabitStats,
    HabitTrendPoint,
    LedgerSnapshotPayload,
    RiskSignals,
)
from infrastructure.settings import Settings
from interface.cli import build_advisor, build_engine

settings = Settings.from_env()
app = FastAPI(title="FinPulse API")
engine = build_engine(settings)
advisor = build_advisor(settings)


def _today(payload: Union[LedgerSnapshotPayload, HabitSnapshotPayload]) -> date:
    return resolve_today(payload.today, settings.timezone)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/evaluate")
def evaluate(payload: LedgerSnapshotPayload) -> EvaluationReport:
    return engine.evaluate(payload.to_models(), payload.budget, today=_today(payload))


@app.post("/state")
def state(payload: LedgerSnapshotPayload) -> FinancialState:
    return compute_state(payload.to_models(), payload.budget, today=_today(payload))


@app.post("/risk")
def risk(payload: LedgerSnapshotPayload) -> RiskSignals:
    current = compute_state(payload.to_models(), payload.budget, today=_today(payload))
    return compute_risk(current, payload.budget)


@app.post("/behavior")
def behavior(payload: LedgerSnapshotPayload) -> BehaviorProfile:
    return compute_behavior(payload.to_models(), today=_today(payload), timezone=settings.timezone)


@app.post("/alerts")
def alerts(payload: LedgerSnapshotPayload) -> List[Alert]:
    return compute_alerts(payload.to_models(), payload.budget, today=_today(payload), timezone=settings.timezone)


@app.post("/finance/stats")
def finance_stats(payload: LedgerSnapshotPayload) -> FinanceStats:
    return compute_finance_stats(payload.to_models(), payload.budget, today=_today(payload))


@app.post("/habits/stats")
def habit_stats(payload: HabitSnapshotPayload) -> HabitStats:
    habits, habit_log = payload.to_models()
    return compute_habit_stats(habits, habit_log, today=_today(payload))


@app.post("/habits/trend")
def habit_trend(payload: HabitSnapshotPayload) -> List[HabitTrendPoint]:
    habits, habit_log = payload.to_models()
    return habit_completion_trend(habits, habit_log, today=_today(payload))


@app.post("/advice")
def advice(request: AdviceRequest) -> AdviceResponse:
    habits, habit_log = request.habits.to_models()
    context = AdvisoryContext(
        today=_today(request.ledger),
        transactions=tuple(request.ledger.to_models()),
        budget=request.ledger.budget,
        habits=tuple(habits),
        habit_log=habit_log,
        holdings=tuple(item.to_model() for item in request.holdings),
        quotes={symbol: quote.to_model() for symbol, quote in request.quotes.items()},
        savings_goals=tuple(item.to_model() for item in request.savings_goals),
        currency_symbol=settings.currency_symbol,
    )
    return advisor.reply(request.message, context)
