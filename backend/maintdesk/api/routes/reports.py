"""
Report Routes

Report table, detail and export, plus the lifecycle actions:
- Assign / reassign to staff
- Status override
- Resolve
- Review (approve / reject)
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_admin_dep, get_correlation_id_dep, get_store_dep
from ...domain.models import ActorContext
from ...engine.report_lifecycle import ReportLifecycle
from ...repositories.record_store import RecordStore
from ...services.report_views import serialize_report
from ...services.view_service import ViewService
from ...utils.logger import get_logger
from .schemas import (
    AssignRequest, StatusUpdateRequest, ReviewRequest, ReportListResponse, ExportResponse
)

logger = get_logger(__name__)
router = APIRouter()


# =============================================================================
# Views
# =============================================================================

@router.get("", response_model=ReportListResponse)
def list_reports(
    search: Optional[str] = Query(None, description="Matches ID, category, type or status"),
    category: str = Query("all"),
    type: str = Query("all"),
    status: str = Query("all"),
    sort_field: str = Query("timestamp"),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
):
    """Searchable, filterable, sortable and paginated report table"""
    return ViewService(store).reports_table(
        search=search,
        category=category,
        type=type,
        status=status,
        sort_field=sort_field,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size
    )


@router.get("/pending-reviews")
def list_pending_reviews(
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Reports awaiting an admin decision on a staff resolution"""
    return ViewService(store).pending_reviews()


@router.get("/export", response_model=ExportResponse)
def export_reports(
    search: Optional[str] = Query(None),
    category: str = Query("all"),
    type: str = Query("all"),
    status: str = Query("all"),
    sort_field: str = Query("timestamp"),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$"),
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
):
    """Filtered report rows for the PDF/CSV exporters"""
    return ViewService(store).export_rows(
        search=search,
        category=category,
        type=type,
        status=status,
        sort_field=sort_field,
        sort_direction=sort_direction
    )


@router.get("/{report_id}")
def get_report(
    report_id: str,
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Single report with its derived display fields"""
    return ViewService(store).report_detail(report_id)


# =============================================================================
# Lifecycle
# =============================================================================

@router.post("/{report_id}/assign")
def assign_report(
    report_id: str,
    request: AssignRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """
    Assign an unassigned report.

    The report moves to In Progress; already-assigned reports answer 409.
    """
    report = ReportLifecycle(store).assign(report_id, request.staff_id, actor=actor)
    return serialize_report(report)


@router.post("/{report_id}/reassign")
def reassign_report(
    report_id: str,
    request: AssignRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """
    Reassign a report to another staff member.

    Any pending resolution claim is cleared. Resolved reports answer 409.
    """
    report = ReportLifecycle(store).reassign(report_id, request.staff_id, actor=actor)
    return serialize_report(report)


@router.post("/{report_id}/status")
def update_report_status(
    report_id: str,
    request: StatusUpdateRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Override the status to Pending, In Progress or Resolved"""
    report = ReportLifecycle(store).update_status(report_id, request.status, actor=actor)
    return serialize_report(report)


@router.post("/{report_id}/resolve")
def resolve_report(
    report_id: str,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Mark a report resolved"""
    report = ReportLifecycle(store).resolve(report_id, actor=actor)
    return serialize_report(report)


@router.post("/{report_id}/review")
def review_report(
    report_id: str,
    request: ReviewRequest,
    actor: ActorContext = Depends(get_current_admin_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """Approve or reject a report in Pending Review"""
    report = ReportLifecycle(store).review(report_id, request.decision, request.note, actor=actor)
    return serialize_report(report)
