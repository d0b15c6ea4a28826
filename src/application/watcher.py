from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from application.engine import AnalyticsEngine
from domain.schemas import EvaluationReport
from infrastructure.notifications import NotificationDispatcher
from infrastructure.persistence.document_store import Document, DocumentStore, Unsubscribe
from infrastructure.snapshot import BUDGET, FINANCES, load_ledger_snapshot

logger = logging.getLogger(__name__)

ReportListener = Callable[[EvaluationReport], None]


class LedgerWatcher:
    """
    Re-evaluates the ledger whenever a watched collection changes.

    The analytics stay pure; this class owns the subscriptions, keeps the
    latest report and forwards alerts to the notification dispatcher.
    """

    WATCHED_COLLECTIONS = (FINANCES, BUDGET)

    def __init__(
        self,
        store: DocumentStore,
        engine: AnalyticsEngine,
        dispatcher: NotificationDispatcher | None = None,
        today_provider: Callable[[], date | None] = lambda: None,
    ):
        self._store = store
        self._engine = engine
        self._dispatcher = dispatcher
        self._today_provider = today_provider
        self._listeners: list[ReportListener] = []
        self._unsubscribers: list[Unsubscribe] = []
        self._starting = False
        self.latest: EvaluationReport | None = None

    def add_listener(self, listener: ReportListener) -> None:
        self._listeners.append(listener)

    def start(self) -> EvaluationReport:
        # Subscriptions fire immediately; evaluate once after all are in place.
        self._starting = True
        try:
            for collection in self.WATCHED_COLLECTIONS:
                self._unsubscribers.append(self._store.subscribe(collection, self._on_change))
        finally:
            self._starting = False
        logger.info("LedgerWatcher started collections=%s", ",".join(self.WATCHED_COLLECTIONS))
        return self.recompute()

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        logger.info("LedgerWatcher stopped")

    def recompute(self) -> EvaluationReport:
        snapshot = load_ledger_snapshot(self._store)
        report = self._engine.evaluate(snapshot.transactions, snapshot.budget, today=self._today_provider())
        self.latest = report
        for listener in list(self._listeners):
            try:
                listener(report)
            except Exception:
                logger.exception("LedgerWatcher listener failed")
        if self._dispatcher is not None:
            self._dispatcher.dispatch(report.alerts)
        return report

    def _on_change(self, _docs: list[Document]) -> None:
        if self._starting:
            return
        self.recompute()
