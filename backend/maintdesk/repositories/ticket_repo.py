"""Support Ticket Repository - Data access for support tickets"""
from typing import Any, Dict, List, Optional

from .record_store import RecordStore
from .store_factory import get_record_store
from ..config.settings import settings
from ..domain.errors import TicketNotFoundError
from ..domain.models import SupportTicket
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SupportTicketRepository:
    """Repository for support ticket documents"""
    
    def __init__(self, store: Optional[RecordStore] = None):
        self._store = store or get_record_store()
        self._collection = settings.tickets_collection
    
    @property
    def collection(self) -> str:
        return self._collection
    
    def get_ticket_or_raise(self, ticket_id: str) -> SupportTicket:
        """Get ticket by ID or raise error"""
        doc = self._store.get_by_id(self._collection, ticket_id)
        if not doc:
            raise TicketNotFoundError(
                f"Ticket {ticket_id} not found",
                details={"ticket_id": ticket_id}
            )
        return SupportTicket.model_validate(doc)
    
    def list_tickets(self) -> List[SupportTicket]:
        """All support tickets"""
        return [SupportTicket.model_validate(doc) for doc in self._store.list(self._collection)]
    
    def update_ticket(self, ticket_id: str, updates: Dict[str, Any]) -> SupportTicket:
        """Apply a single-document field update"""
        doc = self._store.update(self._collection, ticket_id, updates)
        if doc is None:
            raise TicketNotFoundError(
                f"Ticket {ticket_id} not found",
                details={"ticket_id": ticket_id}
            )
        logger.info(f"Updated ticket: {ticket_id}", extra={"ticket_id": ticket_id})
        return SupportTicket.model_validate(doc)
    
    def append_response(
        self,
        ticket_id: str,
        response: Dict[str, Any],
        updates: Dict[str, Any]
    ) -> SupportTicket:
        """Append to the response thread and update the ticket in one write"""
        doc = self._store.append(self._collection, ticket_id, "responses", response, updates)
        if doc is None:
            raise TicketNotFoundError(
                f"Ticket {ticket_id} not found",
                details={"ticket_id": ticket_id}
            )
        logger.info(f"Appended response to ticket: {ticket_id}", extra={"ticket_id": ticket_id})
        return SupportTicket.model_validate(doc)
