from __future__ import annotations

import re

from advisory.base import Intent

_TOKEN_RE = re.compile(r"[a-z']+")

# Evaluated top to bottom; earlier intents win when a message matches several.
INTENT_KEYWORDS: tuple[tuple[Intent, frozenset[str]], ...] = (
    (Intent.GREETING, frozenset({"hello", "hi", "hey"})),
    (Intent.MONTHLY_SPENDING, frozenset({"spent", "spending", "month", "monthly"})),
    (Intent.CATEGORY_BREAKDOWN, frozenset({"category", "categories", "where"})),
    (Intent.BUDGET_ADVICE, frozenset({"budget", "advice", "help"})),
    (Intent.SAVINGS, frozenset({"save", "saving", "savings", "suggest", "suggestion", "suggestions"})),
    (Intent.INVESTMENT, frozenset({"invest", "investment", "investments", "investing", "portfolio"})),
    (Intent.TODAY_SPENDING, frozenset({"today"})),
    (Intent.HABIT_PROGRESS, frozenset({"habit", "habits", "streak", "streaks"})),
)


def tokenize(message: str) -> set[str]:
    return set(_TOKEN_RE.findall((message or "").lower()))


def classify_intent(message: str) -> Intent:
    tokens = tokenize(message)
    for intent, keywords in INTENT_KEYWORDS:
        if tokens & keywords:
            return intent
    return Intent.HELP
