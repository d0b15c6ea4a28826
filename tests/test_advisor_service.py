from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

import advisory  # noqa: F401
from advisory.base import AdvisoryContext, Intent, IntentHandler
from advisory.handlers import HELP_TEXT
from advisory.llm_advisor import LLMAdvisor
from advisory.registry import HandlerRegistry, registry
from application.advisor import AdvisorService
from domain.models import Holding, PriceQuote, Transaction, TransactionType
from infrastructure.persistence.expiring_cache import CallThrottle, ExpiringCache
from infrastructure.settings import Settings


class _FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _StubLLMClient:
    def __init__(self, response: str):
        self.response = response
        self.calls = 0

    def complete(self, prompt: str, system: str | None = None) -> str:
        self.calls += 1
        return self.response


class _FailingHandler(IntentHandler):
    intent = Intent.HELP

    def respond(self, context: AdvisoryContext) -> str:
        raise RuntimeError("boom")


def _context(amount: str = "500", **extra) -> AdvisoryContext:
    txn = Transaction(id="t1", txn_type=TransactionType.EXPENSE, amount=Decimal(amount), date_iso="2026-09-02")
    return AdvisoryContext(today=date(2026, 9, 10), transactions=(txn,), budget=10000, **extra)


class AdvisorServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.settings = Settings()
        self.cache = ExpiringCache(clock=self.clock)

    def _service(self, llm_client=None, service_registry: HandlerRegistry = registry) -> AdvisorService:
        return AdvisorService(
            registry=service_registry,
            llm_advisor=LLMAdvisor(llm_client) if llm_client is not None else None,
            cache=self.cache,
            throttle=CallThrottle(self.settings.advice_throttle_seconds, clock=self.clock),
            settings=self.settings,
        )

    def test_rules_answer_then_cache_hit(self) -> None:
        service = self._service()

        first = service.reply("How much have I spent this month?", _context())
        second = service.reply("how much have i spent this month?  ", _context())

        self.assertEqual(first.source, "rules")
        self.assertEqual(first.intent, "monthly_spending")
        self.assertEqual(second.source, "cache")
        self.assertEqual(second.text, first.text)

    def test_chat_answers_expire_after_ten_minutes(self) -> None:
        service = self._service()
        service.reply("hello", _context())

        self.clock.advance(599)
        self.assertEqual(service.reply("hello", _context()).source, "cache")
        self.clock.advance(2)
        self.assertEqual(service.reply("hello", _context()).source, "rules")

    def test_summary_answers_are_cached_for_an_hour(self) -> None:
        service = self._service()
        service.reply("budget advice please", _context())

        self.clock.advance(601)
        self.assertEqual(service.reply("budget advice please", _context()).source, "cache")
        self.clock.advance(3000)
        self.assertEqual(service.reply("budget advice please", _context()).source, "rules")

    def test_changed_ledger_misses_the_cache(self) -> None:
        service = self._service()
        service.reply("hello", _context("500"))

        self.assertEqual(service.reply("hello", _context("600")).source, "rules")

    def test_llm_answer_is_throttled(self) -> None:
        client = _StubLLMClient("Spend less on takeout.")
        service = self._service(llm_client=client)

        first = service.reply("budget advice", _context())
        second = service.reply("how can I save", _context())
        self.clock.advance(31)
        third = service.reply("where does it go", _context())

        self.assertEqual(first.source, "llm")
        self.assertEqual(first.text, "Spend less on takeout.")
        self.assertEqual(second.source, "rules")
        self.assertEqual(third.source, "llm")
        self.assertEqual(client.calls, 2)

    def test_empty_llm_output_falls_back_to_rules(self) -> None:
        service = self._service(llm_client=_StubLLMClient(""))

        response = service.reply("hello", _context())

        self.assertEqual(response.source, "rules")
        self.assertTrue(response.text.startswith("Hello!"))

    def test_answers_are_stored_in_the_callers_cache(self) -> None:
        service = self._service()

        service.reply("hello", _context())

        self.assertEqual(len(self.cache), 1)

    def test_changed_holdings_miss_the_cache(self) -> None:
        service = self._service()
        before = service.reply(
            "investment portfolio",
            _context(holdings=(Holding(symbol="AAA", quantity=10, avg_price=100),), quotes={"AAA": PriceQuote(price=150)}),
        )

        after = service.reply(
            "investment portfolio",
            _context(holdings=(Holding(symbol="AAA", quantity=50, avg_price=100),), quotes={"AAA": PriceQuote(price=200)}),
        )

        self.assertEqual(after.source, "rules")
        self.assertNotEqual(after.text, before.text)

    def test_throttled_fallback_is_retried_with_the_llm(self) -> None:
        client = _StubLLMClient("Trim the dining budget.")
        service = self._service(llm_client=client)
        service.reply("hello", _context())

        throttled = service.reply("budget advice", _context())
        self.clock.advance(120)
        retried = service.reply("budget advice", _context())

        self.assertEqual(throttled.source, "rules")
        self.assertEqual(retried.source, "llm")
        self.assertEqual(retried.text, "Trim the dining budget.")
        self.assertEqual(client.calls, 2)

    def test_failing_or_missing_handler_answers_with_help(self) -> None:
        failing = HandlerRegistry()
        failing.register(_FailingHandler())

        with self.assertLogs("application.advisor", level="ERROR"):
            self.assertEqual(self._service(service_registry=failing).reply("tell me a joke", _context()).text, HELP_TEXT)
        with self.assertLogs("application.advisor", level="ERROR"):
            self.assertEqual(self._service(service_registry=HandlerRegistry()).reply("hello", _context()).text, HELP_TEXT)


class ExpiringCacheTests(unittest.TestCase):
    def test_entries_expire_at_explicit_timestamp(self) -> None:
        clock = _FakeClock(0)
        cache = ExpiringCache(clock=clock)
        cache.put("k", "v", 10)

        self.assertEqual(cache.expires_at("k"), 10)
        clock.advance(9)
        self.assertEqual(cache.get("k"), "v")
        clock.advance(1)
        self.assertIsNone(cache.get("k"))
        self.assertEqual(len(cache), 0)

    def test_purge_expired(self) -> None:
        clock = _FakeClock(0)
        cache = ExpiringCache(clock=clock)
        cache.put("short", 1, 5)
        cache.put("long", 2, 50)

        clock.advance(10)

        self.assertEqual(cache.purge_expired(), 1)
        self.assertEqual(len(cache), 1)


class CallThrottleTests(unittest.TestCase):
    def test_one_call_per_interval_per_key(self) -> None:
        clock = _FakeClock(0)
        throttle = CallThrottle(30, clock=clock)

        self.assertTrue(throttle.try_acquire("a"))
        self.assertFalse(throttle.try_acquire("a"))
        self.assertTrue(throttle.try_acquire("b"))
        clock.advance(12)
        self.assertAlmostEqual(throttle.seconds_until_allowed("a"), 18)
        clock.advance(18)
        self.assertTrue(throttle.try_acquire("a"))


if __name__ == "__main__":
    unittest.main()
