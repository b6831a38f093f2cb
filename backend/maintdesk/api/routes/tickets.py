"""
Support Ticket Routes

Ticket table and detail, admin responses and status changes.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_admin_dep, get_correlation_id_dep, get_store_dep
from ...domain.enums import AuthorType
from ...domain.models import ActorContext
from ...engine.ticket_lifecycle import DEFAULT_AUTHOR, TicketLifecycle
from ...repositories.record_store import RecordStore
from ...services.ticket_views import serialize_ticket
from ...services.view_service import ViewService
from .schemas import AddResponseRequest, StatusUpdateRequest, TicketListResponse

router = APIRouter()


@router.get("", response_model=TicketListResponse)
def list_tickets(
    search: Optional[str] = Query(None, description="Matches ticket ID, report ID, email or description"),
    category: str = Query("all"),
    status: str = Query("Open"),
    sort_field: str = Query("createdAt"),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
):
    """Support tickets, Open ones by default"""
    return ViewService(store).tickets_table(
        search=search,
        category=category,
        status=status,
        sort_field=sort_field,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size
    )


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    return ViewService(store).ticket_detail(ticket_id)


@router.post("/{ticket_id}/responses")
def add_ticket_response(
    ticket_id: str,
    request: AddResponseRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """
    Reply to a ticket.

    Empty messages answer 400. The ticket moves to In Progress.
    """
    ticket = TicketLifecycle(store).add_response(
        ticket_id,
        request.message,
        author=request.author or DEFAULT_AUTHOR,
        author_type=AuthorType.ADMIN,
        actor=actor
    )
    return serialize_ticket(ticket)


@router.post("/{ticket_id}/status")
def update_ticket_status(
    ticket_id: str,
    request: StatusUpdateRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Set the ticket to Open, In Progress, Resolved or Closed"""
    ticket = TicketLifecycle(store).update_status(ticket_id, request.status, actor=actor)
    return serialize_ticket(ticket)


@router.post("/{ticket_id}/resolve")
def resolve_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    ticket = TicketLifecycle(store).resolve(ticket_id, actor=actor)
    return serialize_ticket(ticket)
