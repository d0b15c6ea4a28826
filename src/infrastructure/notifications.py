from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable

from domain.schemas import Alert

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_WINDOW_SECONDS = 2 * 60 * 60


class NotificationSink(ABC):
    name: str = "sink"

    @abstractmethod
    def deliver(self, alert: Alert) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    name = "log"

    def deliver(self, alert: Alert) -> None:
        logger.info("Notification type=%s severity=%s title=%s message=%s", alert.type.value, alert.severity.value, alert.title, alert.message)


class AlertDeduplicator:
    """Suppresses an alert whose (type, message) was delivered within the window."""

    def __init__(
        self,
        window_seconds: float = DEFAULT_DEDUP_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._window = window_seconds
        self._clock = clock
        self._last_sent: dict[tuple[str, str], float] = {}

    @staticmethod
    def key(alert: Alert) -> tuple[str, str]:
        return alert.type.value, alert.message

    def should_deliver(self, alert: Alert) -> bool:
        sent_at = self._last_sent.get(self.key(alert))
        return sent_at is None or self._clock() - sent_at >= self._window

    def mark_delivered(self, alert: Alert) -> None:
        self._last_sent[self.key(alert)] = self._clock()


class NotificationDispatcher:
    def __init__(self, sinks: Iterable[NotificationSink] | None = None, deduplicator: AlertDeduplicator | None = None):
        self._sinks = list(sinks) if sinks is not None else [LoggingNotificationSink()]
        self._dedup = deduplicator if deduplicator is not None else AlertDeduplicator()

    def dispatch(self, alerts: Iterable[Alert]) -> list[Alert]:
        delivered: list[Alert] = []
        for alert in alerts:
            if not self._dedup.should_deliver(alert):
                logger.debug("Notification suppressed type=%s", alert.type.value)
                continue
            for sink in self._sinks:
                try:
                    sink.deliver(alert)
                except Exception:
                    logger.exception("Notification sink failed sink=%s type=%s", sink.name, alert.type.value)
            self._dedup.mark_delivered(alert)
            delivered.append(alert)
        return delivered
