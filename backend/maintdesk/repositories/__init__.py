"""Repository modules - Data access layer"""
from .record_store import RecordStore, Subscription
from .memory_store import InMemoryRecordStore
from .store_factory import get_record_store, set_record_store, close_record_store, create_record_store
from .report_repo import ReportRepository
from .staff_repo import StaffRepository
from .ticket_repo import SupportTicketRepository

__all__ = [
    "RecordStore",
    "Subscription",
    "InMemoryRecordStore",
    "get_record_store",
    "set_record_store",
    "close_record_store",
    "create_record_store",
    "ReportRepository",
    "StaffRepository",
    "SupportTicketRepository",
]
