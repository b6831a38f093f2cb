"""Transition Rules - legal report/ticket status moves and their side effects

Report state machine:

    Pending --assign--> In Progress --(staff app)--> Pending Review
    Pending Review --review(approve)--> Resolved
    Pending Review --review(reject)--> Rejected
    any state except Resolved --reassign--> In Progress
    any state except Resolved --update_status--> Pending | In Progress | Resolved

Rejected is not terminal for reassignment.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Type, TypeVar

from ..domain.enums import ReportStatus, TicketStatus
from ..domain.errors import InvalidTransitionError, ValidationError
from ..domain.models import Report, Staff

StatusT = TypeVar("StatusT", ReportStatus, TicketStatus)

# Statuses an admin may set directly
REPORT_OVERRIDE_STATUSES = (ReportStatus.PENDING, ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED)
TICKET_OVERRIDE_STATUSES = tuple(TicketStatus)

# Fields wiped when a report changes hands
RESOLUTION_RESET = {
    "resolutionImage": None,
    "resolutionNote": None,
    "resolutionTimestamp": None,
    "pendingReview": False,
}


def status_is(current: str, expected: StatusT) -> bool:
    """Case-insensitive status comparison; stored values are loosely cased"""
    return (current or "").strip().lower() == expected.value.lower()


def parse_status(value: Any, status_type: Type[StatusT], allowed: Iterable[StatusT]) -> StatusT:
    """Resolve a requested status against the allowed set"""
    allowed = tuple(allowed)
    for status in allowed:
        if isinstance(value, str) and status_is(value, status):
            return status
    raise ValidationError(
        f"Status must be one of: {', '.join(s.value for s in allowed)}",
        details={"status": value, "allowed": [s.value for s in allowed], "type": status_type.__name__}
    )


# =============================================================================
# Guards
# =============================================================================

def can_assign(report: Report) -> bool:
    return not report.is_assigned


def can_reassign(report: Report) -> bool:
    return not status_is(report.status, ReportStatus.RESOLVED)


def can_override_status(report: Report) -> bool:
    return not status_is(report.status, ReportStatus.RESOLVED)


def can_review(report: Report) -> bool:
    return status_is(report.status, ReportStatus.PENDING_REVIEW)


def ensure_can_assign(report: Report) -> None:
    if not can_assign(report):
        raise InvalidTransitionError(
            f"Report {report.id} is already assigned; use reassign",
            details={"report_id": report.id, "assigned_to": report.assigned_to}
        )


def ensure_can_reassign(report: Report) -> None:
    if not can_reassign(report):
        raise InvalidTransitionError(
            f"Report {report.id} is resolved and cannot be reassigned",
            details={"report_id": report.id, "status": report.status}
        )


def ensure_can_override_status(report: Report) -> None:
    if not can_override_status(report):
        raise InvalidTransitionError(
            f"Report {report.id} is resolved; its status can no longer be changed",
            details={"report_id": report.id, "status": report.status}
        )


def ensure_can_review(report: Report) -> None:
    if not can_review(report):
        raise InvalidTransitionError(
            f"Report {report.id} is not awaiting review",
            details={"report_id": report.id, "status": report.status}
        )


# =============================================================================
# Side effects
# =============================================================================

def assignment_fields(staff: Staff, now: datetime) -> Dict[str, Any]:
    """Fields written when a report is handed to a staff member"""
    return {
        "assignedTo": staff.email,
        "assignedStaffName": staff.label,
        "assignedStaffDepartment": staff.department_label,
        "status": ReportStatus.IN_PROGRESS.value,
        "assignedAt": now,
    }


def reassignment_fields(staff: Staff, now: datetime) -> Dict[str, Any]:
    """Assignment fields plus a reset of any stale resolution claim"""
    fields = assignment_fields(staff, now)
    fields.update(RESOLUTION_RESET)
    return fields
