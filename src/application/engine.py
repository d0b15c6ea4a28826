from __future__ import annotations

import logging
import time
from datetime import date
from typing import Iterable

from analytics._calendar import resolve_today
from analytics.alerts import compute_alerts
from analytics.behavior import compute_behavior
from analytics.risk import compute_risk
from analytics.state import compute_state
from domain.models import Transaction
from domain.schemas import EvaluationReport

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """Runs state -> risk -> behavior -> alerts over one ledger snapshot."""

    def __init__(self, timezone: str | None = None):
        self._timezone = timezone

    def evaluate(
        self,
        transactions: Iterable[Transaction],
        budget: float | None,
        *,
        today: date | None = None,
    ) -> EvaluationReport:
        rows = list(transactions)
        today = resolve_today(today, self._timezone)
        logger.info("Engine evaluate start transactions=%d budget=%s today=%s", len(rows), budget, today.isoformat())
        t0 = time.perf_counter()

        t = time.perf_counter()
        state = compute_state(rows, budget, today=today)
        logger.info("State complete in %.4fs safety=%s", time.perf_counter() - t, state.safety_level.value)

        t = time.perf_counter()
        risks = compute_risk(state, budget)
        logger.info("Risk complete in %.4fs score=%d", time.perf_counter() - t, risks.risk_score)

        t = time.perf_counter()
        behavior = compute_behavior(rows, today=today, timezone=self._timezone)
        logger.info("Behavior complete in %.4fs recent=%d spikes=%d", time.perf_counter() - t, behavior.recent_frequency, len(behavior.category_spikes))

        t = time.perf_counter()
        alerts = compute_alerts(rows, budget, today=today, timezone=self._timezone, state=state, risks=risks, behavior=behavior)
        logger.info("Alerts complete in %.4fs alerts=%d", time.perf_counter() - t, len(alerts))

        logger.info("Engine evaluate complete in %.4fs", time.perf_counter() - t0)
        return EvaluationReport(state=state, risks=risks, behavior=behavior, alerts=alerts)
