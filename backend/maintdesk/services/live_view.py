"""Live Views - projections that re-run on every store snapshot

A LiveProjection owns one store subscription. Each snapshot is parsed into
domain models, projected, and the result pushed to every listener. Closing
the projection releases the subscription; nothing is delivered afterwards.
"""
import threading
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from .report_views import build_analytics, build_dashboard, build_pending_reviews
from .ticket_views import build_tickets_table
from ..config.settings import settings
from ..domain.errors import ValidationError
from ..domain.models import Report, StoreRecord, SupportTicket
from ..repositories.record_store import Document, RecordStore, Subscription
from ..utils.logger import get_logger

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")
Listener = Callable[[Any], None]
ErrorListener = Callable[[Exception], None]


class LiveProjection(Generic[ResultT]):
    """
    Keeps ``project(records)`` current for one collection.

    Listeners added before start() see the initial snapshot; listeners added
    later receive the latest result immediately.
    """

    def __init__(
        self,
        store: RecordStore,
        collection: str,
        project: Callable[[List[Any]], ResultT],
        model: Optional[Type[StoreRecord]] = None,
        query: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None
    ):
        self.name = name or collection
        self._store = store
        self._collection = collection
        self._project = project
        self._model = model
        self._query = query
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self._error_listeners: List[ErrorListener] = []
        self._subscription: Optional[Subscription] = None
        self._latest: Optional[ResultT] = None
        self._has_result = False
        self._closed = False
        self.updates = 0

    @property
    def latest(self) -> Optional[ResultT]:
        return self._latest

    @property
    def active(self) -> bool:
        return not self._closed and self._subscription is not None and self._subscription.active

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)
            has_result, latest = self._has_result, self._latest
        if has_result:
            listener(latest)

    def add_error_listener(self, listener: ErrorListener) -> None:
        with self._lock:
            self._error_listeners.append(listener)

    def start(self) -> "LiveProjection[ResultT]":
        if self._closed:
            raise RuntimeError(f"Live view {self.name} is closed")
        if self._subscription is None:
            self._subscription = self._store.subscribe(
                self._collection, self._on_snapshot, query=self._query, on_error=self._on_error
            )
            logger.info(f"Live view started: {self.name}", extra={"view": self.name})
        return self

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscription, self._subscription = self._subscription, None
            self._listeners = []
            self._error_listeners = []
        if subscription is not None:
            subscription.close()
        logger.info(f"Live view closed: {self.name}", extra={"view": self.name})

    def __enter__(self) -> "LiveProjection[ResultT]":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _on_snapshot(self, documents: List[Document]) -> None:
        if self._closed:
            return
        try:
            records = [self._model.model_validate(doc) for doc in documents] if self._model else documents
            result = self._project(records)
        except Exception as e:
            logger.error(
                f"Live view {self.name} projection failed: {e}",
                exc_info=True,
                extra={"view": self.name}
            )
            self._on_error(e)
            return

        with self._lock:
            if self._closed:
                return
            self._latest = result
            self._has_result = True
            self.updates += 1
            listeners = list(self._listeners)
        for listener in listeners:
            listener(result)

    def _on_error(self, error: Exception) -> None:
        with self._lock:
            listeners = list(self._error_listeners)
        for listener in listeners:
            listener(error)


# =============================================================================
# Named views
# =============================================================================

def _dashboard(store: RecordStore, params: Dict[str, Any]) -> LiveProjection:
    return LiveProjection(
        store,
        settings.reports_collection,
        lambda reports: build_dashboard(
            reports,
            mode=params.get("mode", "all"),
            category=params.get("category", "all"),
            type=params.get("type", "all"),
        ),
        model=Report,
        name="dashboard",
    )


def _analytics(store: RecordStore, params: Dict[str, Any]) -> LiveProjection:
    custom_range = None
    if params.get("start_date") or params.get("end_date"):
        custom_range = {"start_date": params.get("start_date"), "end_date": params.get("end_date")}
    return LiveProjection(
        store,
        settings.reports_collection,
        lambda reports: build_analytics(
            reports,
            mode=params.get("mode", "all"),
            custom_range=custom_range,
            location=params.get("location", "all"),
            type=params.get("type", "all"),
            status=params.get("status", "all"),
        ),
        model=Report,
        name="analytics",
    )


def _pending_reviews(store: RecordStore, params: Dict[str, Any]) -> LiveProjection:
    return LiveProjection(
        store, settings.reports_collection, build_pending_reviews, model=Report, name="pending-reviews"
    )


def _tickets(store: RecordStore, params: Dict[str, Any]) -> LiveProjection:
    return LiveProjection(
        store,
        settings.tickets_collection,
        lambda tickets: build_tickets_table(
            tickets,
            search=params.get("search"),
            category=params.get("category", "all"),
            status=params.get("status", "Open"),
            page=int(params.get("page", 1)),
            page_size=int(params.get("page_size", settings.default_page_size)),
        ),
        model=SupportTicket,
        name="tickets",
    )


LIVE_VIEWS: Dict[str, Callable[[RecordStore, Dict[str, Any]], LiveProjection]] = {
    "dashboard": _dashboard,
    "analytics": _analytics,
    "pending-reviews": _pending_reviews,
    "tickets": _tickets,
}


def create_live_view(store: RecordStore, view: str, params: Optional[Dict[str, Any]] = None) -> LiveProjection:
    """Unstarted live projection for a named page view"""
    factory = LIVE_VIEWS.get(view)
    if factory is None:
        raise ValidationError(
            f"Unknown live view: {view}",
            details={"view": view, "allowed": sorted(LIVE_VIEWS)}
        )
    return factory(store, dict(params or {}))
