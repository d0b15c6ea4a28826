from __future__ import annotations

import hashlib
import logging
import time

from advisory.base import AdvisoryContext, Intent
from advisory.classifier import classify_intent
from advisory.handlers import HELP_TEXT
from advisory.llm_advisor import LLMAdvisor
from advisory.registry import HandlerRegistry
from domain.schemas import AdviceResponse
from infrastructure.persistence.expiring_cache import CallThrottle, ExpiringCache
from infrastructure.settings import Settings

logger = logging.getLogger(__name__)

# Cached for the summary window instead of the chat window.
SUMMARY_INTENTS = frozenset({Intent.BUDGET_ADVICE, Intent.SAVINGS, Intent.INVESTMENT})
LLM_THROTTLE_KEY = "llm"


def _context_fingerprint(context: AdvisoryContext) -> str:
    parts = [
        context.today.isoformat(),
        str(context.budget),
        context.currency_symbol,
        *(repr(t) for t in context.transactions),
        *(repr(h) for h in context.habits),
        *(f"{day}:{','.join(sorted(ids))}" for day, ids in sorted(context.habit_log.items())),
        *(repr(h) for h in context.holdings),
        *(f"{symbol}={quote!r}" for symbol, quote in sorted(context.quotes.items())),
        *(repr(g) for g in context.savings_goals),
    ]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


class AdvisorService:
    """Answers chat messages from rules, or from the LLM when enabled and not throttled."""

    def __init__(
        self,
        registry: HandlerRegistry,
        llm_advisor: LLMAdvisor | None = None,
        cache: ExpiringCache | None = None,
        throttle: CallThrottle | None = None,
        settings: Settings | None = None,
    ):
        self._registry = registry
        self._llm_advisor = llm_advisor
        self._settings = settings or Settings()
        self._cache = cache if cache is not None else ExpiringCache()
        self._throttle = throttle if throttle is not None else CallThrottle(self._settings.advice_throttle_seconds)

    def reply(self, message: str, context: AdvisoryContext) -> AdviceResponse:
        intent = classify_intent(message)
        cache_key = (intent.value, message.strip().lower(), _context_fingerprint(context))
        logger.info("AdvisorService reply intent=%s", intent.value)

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("AdvisorService cache hit intent=%s", intent.value)
            return AdviceResponse(intent=intent.value, text=cached.text, source="cache")

        response = self._generate(message, intent, context)
        ttl = self._ttl_for(intent, response)
        if ttl > 0:
            self._cache.put(cache_key, response, ttl)
        return response

    def _ttl_for(self, intent: Intent, response: AdviceResponse) -> float:
        ttl = self._settings.summary_cache_seconds if intent in SUMMARY_INTENTS else self._settings.chat_cache_seconds
        if self._llm_advisor is not None and response.source == "rules":
            # A rules fallback only stands in until the LLM may be asked again.
            return min(ttl, self._throttle.seconds_until_allowed(LLM_THROTTLE_KEY))
        return ttl

    def _generate(self, message: str, intent: Intent, context: AdvisoryContext) -> AdviceResponse:
        if self._llm_advisor is not None:
            if self._throttle.try_acquire(LLM_THROTTLE_KEY):
                t = time.perf_counter()
                text = self._llm_advisor.advise(message, intent, context)
                logger.info("AdvisorService llm finished in %.2fs chars=%d", time.perf_counter() - t, len(text))
                if text:
                    return AdviceResponse(intent=intent.value, text=text, source="llm")
            else:
                logger.info(
                    "AdvisorService llm throttled; retry in %.1fs",
                    self._throttle.seconds_until_allowed(LLM_THROTTLE_KEY),
                )
        return AdviceResponse(intent=intent.value, text=self._rule_text(intent, context), source="rules")

    def _rule_text(self, intent: Intent, context: AdvisoryContext) -> str:
        try:
            handler = self._registry.get_handler(intent)
            return handler.respond(context)
        except Exception:
            logger.exception("AdvisorService handler failed intent=%s", intent.value)
            return HELP_TEXT
