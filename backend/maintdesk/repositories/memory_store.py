"""In-Memory Record Store - process-local collections for development and tests"""
import copy
import threading
from typing import Any, Dict, List, Optional

from .record_store import (
    Document, ErrorCallback, RecordStore, SnapshotCallback, Subscription, matches
)
from ..utils.idgen import generate_id
from ..utils.logger import get_logger

logger = get_logger(__name__)


class _MemorySubscription(Subscription):

    def __init__(
        self,
        store: "InMemoryRecordStore",
        collection: str,
        query: Optional[Dict[str, Any]],
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback]
    ):
        self.collection = collection
        self.query = query
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self._store = store
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        if self._active:
            self._active = False
            self._store._remove_subscription(self)

    def deliver(self, snapshot: List[Document]) -> None:
        if not self._active:
            return
        try:
            self.on_snapshot(snapshot)
        except Exception as e:
            logger.error(
                f"Snapshot listener failed on {self.collection}: {e}",
                exc_info=True,
                extra={"collection": self.collection}
            )
            if self.on_error:
                self.on_error(e)


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed collections with synchronous change notification.

    Listeners run on the writer's thread right after each write, with a full
    snapshot of the matching documents.
    """

    def __init__(self, collections: Optional[Dict[str, List[Document]]] = None):
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._subscriptions: List[_MemorySubscription] = []
        for name, documents in (collections or {}).items():
            for document in documents:
                self._insert(name, document)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            document = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(document) if document is not None else None

    def list(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Document]:
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collections.get(collection, {}).values()
                if matches(doc, query)
            ]

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        query: Optional[Dict[str, Any]] = None,
        on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        subscription = _MemorySubscription(self, collection, query, on_snapshot, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.info(f"Subscribed to {collection}", extra={"collection": collection})
        subscription.deliver(self.list(collection, query))
        return subscription

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, collection: str, document: Document) -> Document:
        with self._lock:
            stored = self._insert(collection, document)
        self._notify(collection)
        return copy.deepcopy(stored)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Document]:
        with self._lock:
            document = self._collections.get(collection, {}).get(doc_id)
            if document is None:
                return None
            document.update(copy.deepcopy(fields))
            updated = copy.deepcopy(document)
        self._notify(collection)
        return updated

    def append(
        self,
        collection: str,
        doc_id: str,
        array_field: str,
        item: Any,
        fields: Optional[Dict[str, Any]] = None
    ) -> Optional[Document]:
        with self._lock:
            document = self._collections.get(collection, {}).get(doc_id)
            if document is None:
                return None
            existing = document.get(array_field)
            items = list(existing) if isinstance(existing, list) else []
            items.append(copy.deepcopy(item))
            document[array_field] = items
            document.update(copy.deepcopy(fields or {}))
            updated = copy.deepcopy(document)
        self._notify(collection)
        return updated

    # =========================================================================
    # Housekeeping
    # =========================================================================

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            counts = {name: len(docs) for name, docs in self._collections.items()}
        return {"status": "healthy", "backend": "memory", "collections": counts}

    def close(self) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.close()

    @property
    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _insert(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored["id"] = str(stored.get("id") or generate_id())
        self._collections.setdefault(collection, {})[stored["id"]] = stored
        return stored

    def _remove_subscription(self, subscription: _MemorySubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _notify(self, collection: str) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.collection == collection]
        for subscription in targets:
            subscription.deliver(self.list(collection, subscription.query))
