"""MongoDB Record Store - collections, writes and change-stream listeners"""
import threading
from typing import Any, Dict, List, Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .mongo_client import get_database, health_check as mongo_health_check
from .record_store import Document, ErrorCallback, RecordStore, SnapshotCallback, Subscription
from ..domain.errors import StoreError
from ..utils.idgen import generate_id
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _to_document(raw: Dict[str, Any]) -> Document:
    """Expose Mongo's _id as a string ``id``"""
    doc = dict(raw)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _id_filter(doc_id: str) -> Dict[str, Any]:
    """Match string IDs, and ObjectIds for documents created by other clients"""
    if ObjectId.is_valid(doc_id):
        return {"_id": {"$in": [doc_id, ObjectId(doc_id)]}}
    return {"_id": doc_id}


class _ChangeStreamSubscription(Subscription):
    """
    Daemon thread over a collection change stream.

    Every change event triggers a re-read of the whole matching set; the
    stream is polled so close() takes effect within ``poll_ms``.
    """

    def __init__(
        self,
        collection: Collection,
        query: Optional[Dict[str, Any]],
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback],
        poll_ms: int = 1000
    ):
        self._collection = collection
        self._query = query or {}
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._poll_ms = poll_ms
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"watch-{collection.name}",
            daemon=True
        )
        self._thread.start()

    @property
    def active(self) -> bool:
        return not self._stopped.is_set() and self._thread.is_alive()

    def close(self) -> None:
        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=self._poll_ms / 1000 * 2)

    def _emit(self) -> None:
        snapshot = [_to_document(doc) for doc in self._collection.find(self._query)]
        if not self._stopped.is_set():
            self._on_snapshot(snapshot)

    def _run(self) -> None:
        name = self._collection.name
        try:
            # Open the stream before the first read so no write falls between them
            with self._collection.watch(max_await_time_ms=self._poll_ms) as stream:
                self._emit()
                while not self._stopped.is_set() and stream.alive:
                    change = stream.try_next()
                    if change is None:
                        continue
                    self._emit()
        except PyMongoError as e:
            logger.error(f"Change stream on {name} failed: {e}", extra={"collection": name})
            if self._on_error and not self._stopped.is_set():
                self._on_error(StoreError(f"Listener on {name} failed", details={"reason": str(e)}))
        finally:
            self._stopped.set()
            logger.info(f"Listener on {name} stopped", extra={"collection": name})


class MongoRecordStore(RecordStore):
    """
    Record store over MongoDB.

    Listeners need change streams, so the server must run as a replica set.
    """

    def __init__(self, database: Optional[Database] = None, poll_ms: int = 1000):
        self._db = database if database is not None else get_database()
        self._poll_ms = poll_ms
        self._subscriptions: List[_ChangeStreamSubscription] = []
        self._lock = threading.Lock()

    def _collection(self, name: str) -> Collection:
        return self._db[name]

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            raw = self._collection(collection).find_one(_id_filter(doc_id))
        except PyMongoError as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}", details={"reason": str(e)})
        return _to_document(raw) if raw else None

    def list(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Document]:
        try:
            return [_to_document(doc) for doc in self._collection(collection).find(query or {})]
        except PyMongoError as e:
            raise StoreError(f"Failed to list {collection}", details={"reason": str(e)})

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        query: Optional[Dict[str, Any]] = None,
        on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        subscription = _ChangeStreamSubscription(
            self._collection(collection), query, on_snapshot, on_error, self._poll_ms
        )
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.active]
            self._subscriptions.append(subscription)
        logger.info(f"Subscribed to {collection}", extra={"collection": collection})
        return subscription

    def insert(self, collection: str, document: Document) -> Document:
        doc = dict(document)
        doc["_id"] = str(doc.pop("id", None) or generate_id())
        try:
            self._collection(collection).insert_one(doc)
        except PyMongoError as e:
            raise StoreError(f"Failed to insert into {collection}", details={"reason": str(e)})
        return _to_document(doc)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Document]:
        return self._find_and_update(collection, doc_id, {"$set": fields})

    def append(
        self,
        collection: str,
        doc_id: str,
        array_field: str,
        item: Any,
        fields: Optional[Dict[str, Any]] = None
    ) -> Optional[Document]:
        update: Dict[str, Any] = {"$push": {array_field: item}}
        if fields:
            update["$set"] = fields
        return self._find_and_update(collection, doc_id, update)

    def _find_and_update(self, collection: str, doc_id: str, update: Dict[str, Any]) -> Optional[Document]:
        try:
            raw = self._collection(collection).find_one_and_update(
                _id_filter(doc_id),
                update,
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise StoreError(f"Failed to update {collection}/{doc_id}", details={"reason": str(e)})
        return _to_document(raw) if raw else None

    def health_check(self) -> Dict[str, Any]:
        return mongo_health_check()

    def close(self) -> None:
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.close()
