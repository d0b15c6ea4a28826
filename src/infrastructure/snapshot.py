from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from domain.models import HabitLog, HabitRecord, Transaction
from domain.schemas import HabitPayload, TransactionPayload
from infrastructure.persistence.document_store import Document, DocumentStore

logger = logging.getLogger(__name__)

FINANCES = "finances"
BUDGET = "monthlyBudget"
HABITS = "activities"
HABIT_LOGS = "habitLogs"
BUDGET_DOC_ID = "settings"


class SnapshotError(ValueError):
    pass


@dataclass(frozen=True)
class LedgerSnapshot:
    transactions: tuple[Transaction, ...] = ()
    budget: float | None = None
    habits: tuple[HabitRecord, ...] = ()
    habit_log: HabitLog = field(default_factory=dict)


def normalize_transaction(doc: Document) -> Transaction:
    """Map a stored finance document (camelCase or snake_case keys) onto a Transaction."""
    payload: dict[str, Any] = {
        "id": doc.get("id"),
        "type": doc.get("type") or doc.get("txn_type"),
        "amount": doc.get("amount"),
        "date_iso": doc.get("dateISO") or doc.get("date_iso") or doc.get("date"),
        "category": doc.get("category"),
        "timestamp": doc.get("timestamp"),
        "description": doc.get("desc") or doc.get("description") or "",
    }
    try:
        return TransactionPayload.model_validate(payload).to_model()
    except ValidationError as exc:
        raise SnapshotError(f"Invalid finance document {doc.get('id')!r}: {exc}") from exc


def normalize_habit(doc: Document) -> HabitRecord:
    payload = {
        "id": doc.get("id"),
        "name": doc.get("name") or "",
        "streak": doc.get("streak") or 0,
        "last_completed": doc.get("lastCompleted") or doc.get("last_completed"),
    }
    try:
        return HabitPayload.model_validate(payload).to_model()
    except ValidationError as exc:
        raise SnapshotError(f"Invalid habit document {doc.get('id')!r}: {exc}") from exc


def _load_valid(docs: Iterable[Document], normalize, kind: str) -> list:
    records = []
    for doc in docs:
        try:
            records.append(normalize(doc))
        except SnapshotError as exc:
            logger.warning("Skipping malformed %s document: %s", kind, exc)
    return records


def load_transactions(docs: Iterable[Document]) -> list[Transaction]:
    return _load_valid(docs, normalize_transaction, "finance")


def load_habits(docs: Iterable[Document]) -> list[HabitRecord]:
    return _load_valid(docs, normalize_habit, "habit")


def load_budget(docs: Iterable[Document]) -> float | None:
    for doc in docs:
        if doc.get("id") != BUDGET_DOC_ID:
            continue
        value = doc.get("value")
        try:
            budget = float(value) if value is not None else None
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric budget value=%r", value)
            return None
        if budget is not None and budget < 0:
            logger.warning("Ignoring negative budget value=%r", value)
            return None
        return budget
    return None


def load_habit_log(docs: Iterable[Document]) -> dict[str, frozenset[str]]:
    log: dict[str, frozenset[str]] = {}
    for doc in docs:
        day = doc.get("id")
        habits = doc.get("habits") or []
        if not isinstance(day, str) or not isinstance(habits, list):
            logger.warning("Skipping malformed habit log document id=%r", day)
            continue
        log[day] = frozenset(str(habit_id) for habit_id in habits)
    return log


def load_ledger_snapshot(store: DocumentStore) -> LedgerSnapshot:
    snapshot = LedgerSnapshot(
        transactions=tuple(load_transactions(store.list(FINANCES))),
        budget=load_budget(store.list(BUDGET)),
        habits=tuple(load_habits(store.list(HABITS))),
        habit_log=load_habit_log(store.list(HABIT_LOGS)),
    )
    logger.info(
        "Snapshot loaded store=%s transactions=%d habits=%d budget=%s",
        store.name,
        len(snapshot.transactions),
        len(snapshot.habits),
        snapshot.budget,
    )
    return snapshot
