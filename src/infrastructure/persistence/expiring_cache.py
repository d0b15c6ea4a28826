from __future__ import annotations

import time
from typing import Any, Callable, Hashable


class ExpiringCache:
    """Key/value store whose entries carry an explicit expiry timestamp."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[Hashable, tuple[Any, float]] = {}

    def put(self, key: Hashable, value: Any, ttl_seconds: float) -> None:
        self._store[key] = (value, self._clock() + ttl_seconds)

    def get(self, key: Hashable) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def expires_at(self, key: Hashable) -> float | None:
        entry = self._store.get(key)
        return entry[1] if entry else None

    def purge_expired(self) -> int:
        now = self._clock()
        stale = [key for key, (_, expires_at) in self._store.items() if now >= expires_at]
        for key in stale:
            del self._store[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._store)


class CallThrottle:
    """Allows at most one call per key every `min_interval_seconds`."""

    def __init__(self, min_interval_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._min_interval = min_interval_seconds
        self._clock = clock
        self._last_call: dict[Hashable, float] = {}

    def seconds_until_allowed(self, key: Hashable = "default") -> float:
        last = self._last_call.get(key)
        if last is None:
            return 0.0
        return max(0.0, self._min_interval - (self._clock() - last))

    def try_acquire(self, key: Hashable = "default") -> bool:
        if self.seconds_until_allowed(key) > 0:
            return False
        self._last_call[key] = self._clock()
        return True
