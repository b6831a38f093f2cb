"""View Service - Reads the current record set and builds page projections"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from . import aggregator as agg
from .report_views import (
    build_analytics, build_dashboard, build_pending_reviews, build_reports_table,
    serialize_report
)
from .ticket_views import build_tickets_table, serialize_ticket
from ..config.settings import settings
from ..domain.enums import DateRangeMode, SortDirection, TicketStatus
from ..domain.errors import ValidationError
from ..domain.models import CustomDateRange
from ..repositories.record_store import RecordStore
from ..repositories.report_repo import ReportRepository
from ..repositories.staff_repo import StaffRepository
from ..repositories.ticket_repo import SupportTicketRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ViewService:
    """One-shot projections over the store's current contents"""

    def __init__(self, store: Optional[RecordStore] = None):
        self.report_repo = ReportRepository(store)
        self.staff_repo = StaffRepository(store)
        self.ticket_repo = SupportTicketRepository(store)

    # =========================================================================
    # Reports
    # =========================================================================

    def dashboard(
        self,
        mode: Optional[str] = DateRangeMode.ALL.value,
        category: Optional[str] = "all",
        type: Optional[str] = "all",
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        return build_dashboard(
            self.report_repo.list_reports(), mode=mode, category=category, type=type, now=now
        )

    def analytics(
        self,
        mode: Optional[str] = DateRangeMode.ALL.value,
        custom_range: Optional[CustomDateRange] = None,
        location: Optional[str] = "all",
        type: Optional[str] = "all",
        status: Optional[str] = "all",
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        return build_analytics(
            self.report_repo.list_reports(),
            mode=mode,
            custom_range=custom_range,
            location=location,
            type=type,
            status=status,
            now=now,
        )

    def reports_table(
        self,
        search: Optional[str] = None,
        category: Optional[str] = "all",
        type: Optional[str] = "all",
        status: Optional[str] = "all",
        sort_field: str = "timestamp",
        sort_direction: str = SortDirection.DESC.value,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> Dict[str, Any]:
        return build_reports_table(
            self.report_repo.list_reports(),
            search=search,
            category=category,
            type=type,
            status=status,
            sort_field=sort_field,
            sort_direction=sort_direction,
            page=page,
            page_size=self._page_size(page_size),
        )

    def report_detail(self, report_id: str) -> Dict[str, Any]:
        return serialize_report(self.report_repo.get_report_or_raise(report_id))

    def pending_reviews(self) -> Dict[str, Any]:
        return build_pending_reviews(self.report_repo.list_reports())

    def export_rows(
        self,
        search: Optional[str] = None,
        category: Optional[str] = "all",
        type: Optional[str] = "all",
        status: Optional[str] = "all",
        sort_field: str = "timestamp",
        sort_direction: str = SortDirection.DESC.value
    ) -> Dict[str, Any]:
        """Rows for the export collaborators, same filters as the table but unpaginated"""
        reports = agg.search_records(self.report_repo.list_reports(), search)
        reports = agg.filter_by_attributes(reports, category=category, type=type, status=status)
        reports = agg.sort_records(reports, sort_field, sort_direction)
        logger.info(f"Exporting {len(reports)} reports", extra={"view": "export"})
        return {"headers": list(agg.EXPORT_HEADERS), "rows": agg.export_rows(reports)}

    # =========================================================================
    # Staff
    # =========================================================================

    def staff_options(self) -> List[Dict[str, Any]]:
        """Assignable staff for the assign/reassign pickers"""
        return [
            {
                "id": staff.id,
                "email": staff.email,
                "label": staff.label,
                "department": staff.department_label,
            }
            for staff in self.staff_repo.list_staff()
        ]

    # =========================================================================
    # Support tickets
    # =========================================================================

    def tickets_table(
        self,
        search: Optional[str] = None,
        category: Optional[str] = "all",
        status: Optional[str] = TicketStatus.OPEN.value,
        sort_field: str = "createdAt",
        sort_direction: str = SortDirection.DESC.value,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> Dict[str, Any]:
        return build_tickets_table(
            self.ticket_repo.list_tickets(),
            search=search,
            category=category,
            status=status,
            sort_field=sort_field,
            sort_direction=sort_direction,
            page=page,
            page_size=self._page_size(page_size),
        )

    def ticket_detail(self, ticket_id: str) -> Dict[str, Any]:
        return serialize_ticket(self.ticket_repo.get_ticket_or_raise(ticket_id))

    @staticmethod
    def _page_size(page_size: Optional[int]) -> int:
        if page_size is None:
            return settings.default_page_size
        if page_size < 1 or page_size > settings.max_page_size:
            raise ValidationError(
                f"Page size must be between 1 and {settings.max_page_size}",
                details={"page_size": page_size}
            )
        return page_size
