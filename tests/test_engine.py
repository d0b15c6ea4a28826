from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from application.engine import AnalyticsEngine
from domain.models import AlertType, SafetyLevel, Transaction, TransactionType


def _txn(id: str, amount: str, day: str) -> Transaction:
    return Transaction(id=id, txn_type=TransactionType.EXPENSE, amount=Decimal(amount), date_iso=day)


class AnalyticsEngineTests(unittest.TestCase):
    def test_engine_returns_full_report(self) -> None:
        engine = AnalyticsEngine(timezone="Asia/Kolkata")

        report = engine.evaluate([_txn("t1", "8000", "2026-09-01")], 10000, today=date(2026, 9, 10))

        self.assertEqual(report.state.safety_level, SafetyLevel.CRITICAL)
        self.assertEqual(report.risks.overspend_risk, 47)
        self.assertEqual(report.behavior.recent_frequency, 0)
        self.assertEqual([a.type for a in report.alerts], [AlertType.BUDGET_WARNING, AlertType.VELOCITY_SPIKE])

    def test_engine_logs_each_stage(self) -> None:
        engine = AnalyticsEngine(timezone="Asia/Kolkata")

        with self.assertLogs("application.engine", level="INFO") as logs:
            engine.evaluate([], None, today=date(2026, 9, 10))

        joined = "\n".join(logs.output)
        for stage in ("State complete", "Risk complete", "Behavior complete", "Alerts complete"):
            self.assertIn(stage, joined)

    def test_report_serializes_to_json(self) -> None:
        report = AnalyticsEngine().evaluate([], None, today=date(2026, 2, 28))

        payload = report.model_dump(mode="json")

        self.assertEqual(payload["state"]["as_of"], "2026-02-28")
        self.assertEqual(payload["state"]["days_in_month"], 28)
        self.assertEqual(payload["state"]["safety_level"], "Stable")
        self.assertEqual(payload["alerts"], [])


if __name__ == "__main__":
    unittest.main()
