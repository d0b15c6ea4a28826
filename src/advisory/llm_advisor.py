from __future__ import annotations

import json
import logging
from typing import Any, Dict, Protocol

from advisory.base import AdvisoryContext, Intent
from analytics.behavior import compute_behavior
from analytics.habits import compute_habit_stats
from analytics.risk import compute_risk
from analytics.state import compute_state

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a concise personal finance and habit coach. Answer in at most four short sentences, "
    "use only the numbers provided in the context, and never invent transactions."
)

HABIT_INTENTS = {Intent.HABIT_PROGRESS}


class CompletionClient(Protocol):
    def complete(self, prompt: str, system: str | None = None) -> str:
        ...


class LLMAdvisor:
    """Builds advisory prompts from derived analytics and returns model text (or "" to fall back)."""

    def __init__(self, llm_client: CompletionClient):
        self._llm = llm_client

    def build_context(self, intent: Intent, context: AdvisoryContext) -> Dict[str, Any]:
        if intent in HABIT_INTENTS:
            stats = compute_habit_stats(context.habits, context.habit_log, today=context.today)
            return {
                "habits": [{"id": h.id, "name": h.name, "streak": h.streak} for h in context.habits],
                "habit_log": {day: sorted(ids) for day, ids in context.habit_log.items()},
                "habit_stats": stats.model_dump(),
            }

        state = compute_state(context.transactions, context.budget, today=context.today)
        return {
            "budget": context.budget,
            "state": state.model_dump(mode="json"),
            "risks": compute_risk(state, context.budget).model_dump(),
            "behavior": compute_behavior(context.transactions, today=context.today).model_dump(),
        }

    def build_prompt(self, message: str, intent: Intent, context: AdvisoryContext) -> str:
        prompt_payload: Dict[str, Any] = {
            "task": "Answer the user's question using the analytics context.",
            "question": message,
            "intent": intent.value,
            "currency_symbol": context.currency_symbol,
            "today": context.today.isoformat(),
            "context": self.build_context(intent, context),
            "rules": [
                "Plain text only.",
                "Quote amounts with the currency symbol.",
                "If the context lacks the data, say what the user should record first.",
            ],
        }
        return json.dumps(prompt_payload, indent=2, default=str)

    def advise(self, message: str, intent: Intent, context: AdvisoryContext) -> str:
        logger.info("LLMAdvisor advise start intent=%s transactions=%d", intent.value, len(context.transactions))
        text = self._llm.complete(self.build_prompt(message, intent, context), system=SYSTEM_PROMPT).strip()
        if not text:
            logger.info("LLMAdvisor empty response; caller falls back to rules")
        return text
