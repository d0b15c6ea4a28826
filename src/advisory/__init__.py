# Importing the handlers module registers every intent handler.
from advisory import handlers  # noqa: F401
from advisory.base import AdvisoryContext, Intent, IntentHandler
from advisory.classifier import classify_intent
from advisory.registry import HandlerRegistry, register_handler, registry

__all__ = [
    "AdvisoryContext",
    "HandlerRegistry",
    "Intent",
    "IntentHandler",
    "classify_intent",
    "register_handler",
    "registry",
]
