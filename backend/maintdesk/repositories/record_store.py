"""Record Store - interface to the external document database"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]
ErrorCallback = Callable[[Exception], None]


class Subscription(ABC):
    """Handle for a live collection listener. Close it when the view goes away."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """True until close() is called or the stream dies"""

    @abstractmethod
    def close(self) -> None:
        """Release the listener. Safe to call more than once."""

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class RecordStore(ABC):
    """
    Document collections read and mutated by the admin core.

    Documents are plain dicts carrying their ID under ``id``. Queries are
    equality matches on top-level fields. Writes are single-document and are
    never retried; driver failures surface as StoreError.
    """

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        query: Optional[Dict[str, Any]] = None,
        on_error: Optional[ErrorCallback] = None
    ) -> Subscription:
        """
        Listen to a collection.

        ``on_snapshot`` receives the full matching record set once on
        subscription and again after every change to the collection.
        """

    @abstractmethod
    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch one document, None if absent"""

    @abstractmethod
    def list(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Document]:
        """Fetch every document matching the query"""

    @abstractmethod
    def insert(self, collection: str, document: Document) -> Document:
        """Create a document, generating an ID when it has none"""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Document]:
        """Set top-level fields; returns the updated document or None if absent"""

    @abstractmethod
    def append(
        self,
        collection: str,
        doc_id: str,
        array_field: str,
        item: Any,
        fields: Optional[Dict[str, Any]] = None
    ) -> Optional[Document]:
        """Append to an array field and set other fields in the same write"""

    @abstractmethod
    def health_check(self) -> Dict[str, Any]:
        """Report connectivity"""

    def close(self) -> None:
        """Release connections and listeners"""


def matches(document: Document, query: Optional[Dict[str, Any]]) -> bool:
    """Equality match on top-level fields"""
    if not query:
        return True
    return all(document.get(key) == value for key, value in query.items())
