"""Ticket Views - support ticket table projection"""
from typing import Any, Dict, List, Optional, Sequence

from . import aggregator as agg
from ..config.settings import settings
from ..domain.enums import SortDirection, TicketStatus
from ..domain.models import SupportTicket

TICKET_SEARCH_FIELDS = ("id", "reportId", "userEmail", "issueDescription")


def serialize_ticket(ticket: SupportTicket) -> Dict[str, Any]:
    data = ticket.model_dump(mode="json", by_alias=True)
    data["shortId"] = ticket.short_id
    data["responseCount"] = len(ticket.responses)
    return data


def filter_tickets(
    tickets: Sequence[SupportTicket],
    search: Optional[str] = None,
    category: Optional[str] = "all",
    status: Optional[str] = TicketStatus.OPEN.value
) -> List[SupportTicket]:
    """
    Search plus category and status filters.

    Category matches the linked report's category, case-insensitively.
    Tickets stored without a status count as Open.
    """
    matched = agg.search_records(tickets, search, fields=TICKET_SEARCH_FIELDS)

    if category and category.strip().lower() != "all":
        wanted = agg.normalize_category(category)
        matched = [t for t in matched if agg.normalize_category(t.report_category) == wanted]

    if status and status.strip().lower() != "all":
        matched = [t for t in matched if (t.status or TicketStatus.OPEN.value) == status]

    return matched


def status_counts(tickets: Sequence[SupportTicket]) -> Dict[str, int]:
    """Ticket count per status, every known status present"""
    counts = {status.value: 0 for status in TicketStatus}
    counts.update(agg.group_count(tickets, lambda t: t.status or TicketStatus.OPEN.value))
    return counts


def build_tickets_table(
    tickets: Sequence[SupportTicket],
    search: Optional[str] = None,
    category: Optional[str] = "all",
    status: Optional[str] = TicketStatus.OPEN.value,
    sort_field: str = "createdAt",
    sort_direction: str = SortDirection.DESC.value,
    page: int = 1,
    page_size: Optional[int] = None
) -> Dict[str, Any]:
    page_size = page_size or settings.default_page_size
    matched = filter_tickets(tickets, search=search, category=category, status=status)
    ordered = agg.sort_records(matched, sort_field, sort_direction)

    return {
        "items": [serialize_ticket(t) for t in agg.paginate(ordered, page, page_size)],
        "page": page,
        "page_size": page_size,
        "total": len(ordered),
        "total_pages": agg.total_pages(len(ordered), page_size),
        "status_counts": status_counts(tickets),
        "options": {
            "categories": agg.unique_values(tickets, lambda t: agg.normalize_category(t.report_category)),
        },
    }
