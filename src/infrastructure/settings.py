from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_CURRENCY_SYMBOL = "₹"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def configured_timezone() -> str:
    return os.getenv("FINPULSE_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE


@dataclass(frozen=True)
class Settings:
    timezone: str = DEFAULT_TIMEZONE
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    advice_throttle_seconds: float = 30.0
    chat_cache_seconds: float = 600.0
    summary_cache_seconds: float = 3600.0
    alert_dedup_seconds: float = 7200.0
    llm_enabled: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            timezone=configured_timezone(),
            currency_symbol=os.getenv("FINPULSE_CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL),
            advice_throttle_seconds=float(os.getenv("FINPULSE_ADVICE_THROTTLE_SECONDS", "30")),
            chat_cache_seconds=float(os.getenv("FINPULSE_CHAT_CACHE_SECONDS", "600")),
            summary_cache_seconds=float(os.getenv("FINPULSE_SUMMARY_CACHE_SECONDS", "3600")),
            alert_dedup_seconds=float(os.getenv("FINPULSE_ALERT_DEDUP_SECONDS", "7200")),
            llm_enabled=_env_bool("FINPULSE_LLM_ENABLED", False),
        )
