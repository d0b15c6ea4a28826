from __future__ import annotations

from advisory.base import Intent, IntentHandler


class HandlerRegistry:
    def __init__(self):
        self._handlers: dict[Intent, IntentHandler] = {}

    def register(self, handler: IntentHandler) -> None:
        self._handlers[handler.intent] = handler

    def get_handler(self, intent: Intent) -> IntentHandler:
        if intent not in self._handlers:
            raise KeyError(f"No handler registered for intent: {intent.value}")
        return self._handlers[intent]

    def intents(self) -> list[Intent]:
        return list(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()


registry = HandlerRegistry()


def register_handler(handler_cls: type[IntentHandler]) -> type[IntentHandler]:
    registry.register(handler_cls())
    return handler_cls
