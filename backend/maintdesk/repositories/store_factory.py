"""Record store selection and process-wide instance"""
from typing import Optional

from .record_store import RecordStore
from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

_store: Optional[RecordStore] = None


def create_record_store(backend: Optional[str] = None) -> RecordStore:
    """Build the store named by ``backend`` (defaults to settings.store_backend)"""
    backend = (backend or settings.store_backend).lower()
    if backend == "memory":
        from .memory_store import InMemoryRecordStore
        return InMemoryRecordStore()
    if backend == "mongo":
        from .mongo_store import MongoRecordStore
        return MongoRecordStore()
    raise ValueError(f"Unknown store backend: {backend}")


def get_record_store() -> RecordStore:
    """Get or create the process-wide record store"""
    global _store
    if _store is None:
        _store = create_record_store()
        logger.info(f"Using {settings.store_backend} record store")
    return _store


def set_record_store(store: Optional[RecordStore]) -> None:
    """Install a store instance (or clear it with None)"""
    global _store
    _store = store


def close_record_store() -> None:
    """Close and forget the process-wide store"""
    global _store
    if _store is not None:
        _store.close()
        _store = None
