from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path
from typing import Any

from advisory.base import AdvisoryContext
from advisory.llm_advisor import LLMAdvisor
from advisory.registry import registry
from analytics._calendar import resolve_today
from application.advisor import AdvisorService
from application.engine import AnalyticsEngine
from application.watcher import LedgerWatcher
from domain.schemas import HabitSnapshotPayload, LedgerSnapshotPayload
from infrastructure.llm.llm_client import LLMClient
from infrastructure.notifications import AlertDeduplicator, NotificationDispatcher
from infrastructure.persistence.document_store import DocumentStore
from infrastructure.settings import Settings


def build_engine(settings: Settings | None = None) -> AnalyticsEngine:
    settings = settings or Settings.from_env()
    return AnalyticsEngine(timezone=settings.timezone)


def build_advisor(settings: Settings | None = None) -> AdvisorService:
    settings = settings or Settings.from_env()
    llm_advisor = LLMAdvisor(LLMClient()) if settings.llm_enabled else None
    return AdvisorService(registry=registry, llm_advisor=llm_advisor, settings=settings)


def build_watcher(store: DocumentStore, settings: Settings | None = None) -> LedgerWatcher:
    settings = settings or Settings.from_env()
    dispatcher = NotificationDispatcher(deduplicator=AlertDeduplicator(window_seconds=settings.alert_dedup_seconds))
    return LedgerWatcher(store, build_engine(settings), dispatcher=dispatcher)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="finpulse", description="Evaluate a ledger snapshot JSON file.")
    parser.add_argument("snapshot", type=Path, help="JSON file with transactions, budget, habits and habit_log")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Evaluation date (YYYY-MM-DD)")
    parser.add_argument("--ask", default=None, help="Also answer an advisory question about the snapshot")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> dict[str, Any]:
    args = _parse_args(argv)
    settings = Settings.from_env()
    raw = json.loads(args.snapshot.read_text(encoding="utf-8"))

    ledger = LedgerSnapshotPayload.model_validate(raw)
    habit_snapshot = HabitSnapshotPayload.model_validate(raw)
    today = resolve_today(args.today or ledger.today, settings.timezone)
    transactions = ledger.to_models()

    report = build_engine(settings).evaluate(transactions, ledger.budget, today=today)
    output: dict[str, Any] = {"report": report.model_dump(mode="json")}

    if args.ask:
        habits, habit_log = habit_snapshot.to_models()
        context = AdvisoryContext(
            today=today,
            transactions=tuple(transactions),
            budget=ledger.budget,
            habits=tuple(habits),
            habit_log=habit_log,
            currency_symbol=settings.currency_symbol,
        )
        output["advice"] = build_advisor(settings).reply(args.ask, context).model_dump()
    return output


def main(argv: list[str] | None = None) -> None:
    print(json.dumps(run(argv), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
