"""Report Lifecycle - assignment, status override, resolution and review"""
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Union

from . import transition_rules as rules
from ..domain.enums import LifecycleAction, ReportStatus, ReviewDecision
from ..domain.errors import ValidationError
from ..domain.models import ActorContext, Report
from ..repositories.record_store import RecordStore
from ..repositories.report_repo import ReportRepository
from ..repositories.staff_repo import StaffRepository
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

DEFAULT_REVIEWER = "admin"


class ReportLifecycle:
    """
    Every report mutation the admin console performs.

    Each operation reads the current report, checks the transition rules and
    writes one single-document update. Nothing is retried: NotFoundError,
    InvalidTransitionError, ValidationError and StoreError go straight back
    to the caller.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.report_repo = ReportRepository(store)
        self.staff_repo = StaffRepository(store)
        self._clock = clock

    def assign(self, report_id: str, staff_id: str, actor: Optional[ActorContext] = None) -> Report:
        """Hand an unassigned report to a staff member"""
        report = self.report_repo.get_report_or_raise(report_id)
        rules.ensure_can_assign(report)
        staff = self.staff_repo.get_staff_or_raise(staff_id)

        updated = self.report_repo.update_report(
            report_id, rules.assignment_fields(staff, self._clock())
        )
        self._log(LifecycleAction.ASSIGN, updated, actor, staff_email=staff.email)
        return updated

    def reassign(self, report_id: str, staff_id: str, actor: Optional[ActorContext] = None) -> Report:
        """
        Move a report to another staff member.

        Clears resolutionImage, resolutionNote, resolutionTimestamp and
        pendingReview so the new assignee does not inherit a resolution claim.
        """
        report = self.report_repo.get_report_or_raise(report_id)
        rules.ensure_can_reassign(report)
        staff = self.staff_repo.get_staff_or_raise(staff_id)

        updated = self.report_repo.update_report(
            report_id, rules.reassignment_fields(staff, self._clock())
        )
        self._log(
            LifecycleAction.REASSIGN, updated, actor,
            staff_email=staff.email, previous_assignee=report.assigned_to
        )
        return updated

    def update_status(
        self,
        report_id: str,
        new_status: Union[str, ReportStatus],
        actor: Optional[ActorContext] = None
    ) -> Report:
        """Manual override into Pending, In Progress or Resolved. No-op when unchanged."""
        status = rules.parse_status(
            new_status.value if isinstance(new_status, ReportStatus) else new_status,
            ReportStatus,
            rules.REPORT_OVERRIDE_STATUSES
        )
        report = self.report_repo.get_report_or_raise(report_id)
        if rules.status_is(report.status, status):
            return report
        rules.ensure_can_override_status(report)

        updated = self.report_repo.update_report(report_id, {"status": status.value})
        self._log(LifecycleAction.UPDATE_STATUS, updated, actor, previous_status=report.status)
        return updated

    def resolve(self, report_id: str, actor: Optional[ActorContext] = None) -> Report:
        """Mark resolved, e.g. when accepting a staff-submitted resolution"""
        self.report_repo.get_report_or_raise(report_id)
        updated = self.report_repo.update_report(
            report_id,
            {
                "status": ReportStatus.RESOLVED.value,
                "resolvedAt": self._clock(),
                "pendingReview": False,
            }
        )
        self._log(LifecycleAction.RESOLVE, updated, actor)
        return updated

    def review(
        self,
        report_id: str,
        decision: Union[str, ReviewDecision],
        note: Optional[str] = None,
        actor: Optional[ActorContext] = None
    ) -> Report:
        """Approve (-> Resolved) or reject (-> Rejected) a report awaiting review"""
        decision = self._parse_decision(decision)
        report = self.report_repo.get_report_or_raise(report_id)
        rules.ensure_can_review(report)

        status = ReportStatus.RESOLVED if decision == ReviewDecision.APPROVE else ReportStatus.REJECTED
        updated = self.report_repo.update_report(
            report_id,
            {
                "status": status.value,
                "pendingReview": False,
                "reviewedAt": self._clock(),
                "reviewNote": note or "",
                "reviewedBy": actor.email if actor else DEFAULT_REVIEWER,
            }
        )
        self._log(LifecycleAction.REVIEW, updated, actor, decision=decision.value)
        return updated

    @staticmethod
    def _parse_decision(decision: Union[str, ReviewDecision]) -> ReviewDecision:
        if isinstance(decision, ReviewDecision):
            return decision
        try:
            return ReviewDecision(str(decision).strip().lower())
        except ValueError:
            raise ValidationError(
                "Review decision must be 'approve' or 'reject'",
                details={"decision": decision}
            )

    @staticmethod
    def _log(
        action: LifecycleAction,
        report: Report,
        actor: Optional[ActorContext],
        staff_email: Optional[str] = None,
        **details: Any
    ) -> None:
        extra: Dict[str, Any] = {
            "action": action.value,
            "report_id": report.id,
            "status": report.status,
            "actor_email": actor.email if actor else None,
        }
        if staff_email:
            extra["staff_email"] = staff_email
        suffix = " ".join(f"{key}={value}" for key, value in details.items())
        logger.info(f"Report {action.value.lower()}: {report.id} {suffix}".rstrip(), extra=extra)
