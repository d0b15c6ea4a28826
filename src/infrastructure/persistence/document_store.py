from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)

Document = dict[str, Any]
ChangeCallback = Callable[[list[Document]], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """Collection-of-documents contract the analytics layer reads snapshots through."""

    name: str = "store"

    @abstractmethod
    def save(self, collection: str, doc_id: str, record: Document) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self, collection: str) -> list[Document]:
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        """Call `callback` with the full collection now and after every change."""
        raise NotImplementedError


class InMemoryDocumentStore(DocumentStore):
    name = "memory"

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._subscribers: dict[str, list[ChangeCallback]] = {}

    def save(self, collection: str, doc_id: str, record: Document) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(record)
        logger.debug("Document saved collection=%s id=%s", collection, doc_id)
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        removed = self._collections.get(collection, {}).pop(doc_id, None)
        if removed is not None:
            logger.debug("Document deleted collection=%s id=%s", collection, doc_id)
            self._notify(collection)

    def list(self, collection: str) -> list[Document]:
        return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        listeners = self._subscribers.setdefault(collection, [])
        listeners.append(callback)
        callback(self.list(collection))

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        for callback in list(self._subscribers.get(collection, [])):
            try:
                callback(self.list(collection))
            except Exception:
                logger.exception("Subscriber failed collection=%s", collection)
