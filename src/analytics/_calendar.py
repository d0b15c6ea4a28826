from __future__ import annotations

import math
from calendar import monthrange
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from infrastructure.settings import configured_timezone


class UnknownTimezoneError(ValueError):
    pass


def resolve_zone(name: str | None = None) -> ZoneInfo:
    zone_name = name or configured_timezone()
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise UnknownTimezoneError(f"Unknown timezone: {zone_name!r}") from exc


def coerce_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def resolve_today(today: date | None = None, timezone: str | None = None) -> date:
    if today is not None:
        return today
    return datetime.now(resolve_zone(timezone)).date()


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def days_in_month(day: date) -> int:
    return monthrange(day.year, day.month)[1]


def trailing_dates(today: date, days: int = 7) -> list[str]:
    """ISO dates for `today` and the `days - 1` days before it, newest first."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days)]


def local_time_of(timestamp: datetime, timezone: str | None = None) -> time:
    # Naive timestamps are already wall-clock time in the configured zone.
    if timestamp.tzinfo is None:
        return timestamp.time()
    return timestamp.astimezone(resolve_zone(timezone)).time()


def weekday_label(day: date) -> str:
    return day.strftime("%a")


def safe_div(numerator: float, denominator: float) -> float:
    return numerator / (denominator or 1)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
