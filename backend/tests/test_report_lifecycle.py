"""Report lifecycle: assign, reassign, status override, resolve, review"""
import pytest

from maintdesk.config.settings import settings
from maintdesk.domain.enums import ReportStatus, ReviewDecision
from maintdesk.domain.errors import (
    InvalidTransitionError, ReportNotFoundError, StaffNotFoundError, StoreError, ValidationError
)
from maintdesk.engine.report_lifecycle import ReportLifecycle
from maintdesk.engine import transition_rules as rules
from maintdesk.domain.models import Report

from .conftest import NOW_UTC, make_report


@pytest.fixture
def lifecycle(store, clock):
    return ReportLifecycle(store, clock=clock)


def stored(store, report_id):
    return store.get_by_id(settings.reports_collection, report_id)


class TestAssign:

    def test_assign_sets_staff_fields_and_moves_to_in_progress(self, lifecycle, store, actor):
        report = lifecycle.assign("RPT-PENDING", "staff-1", actor=actor)

        assert report.status == ReportStatus.IN_PROGRESS.value
        doc = stored(store, "RPT-PENDING")
        assert doc["assignedTo"] == "aiman@uni.edu.my"
        assert doc["assignedStaffName"] == "Aiman Hakim"
        assert doc["assignedStaffDepartment"] == "Electrical"
        assert doc["status"] == "In Progress"
        assert doc["assignedAt"] == NOW_UTC

    def test_staff_label_falls_back_to_name_then_email(self, lifecycle, store):
        lifecycle.assign("RPT-PENDING", "staff-2")
        doc = stored(store, "RPT-PENDING")
        assert doc["assignedStaffName"] == "Tan Mei Ling"
        assert doc["assignedStaffDepartment"] == "N/A"

        store.update(settings.reports_collection, "RPT-PENDING", {"assignedTo": None})
        lifecycle.assign("RPT-PENDING", "staff-3")
        assert stored(store, "RPT-PENDING")["assignedStaffName"] == "ravi@uni.edu.my"

    def test_assign_already_assigned_report_is_refused(self, lifecycle, store):
        before = stored(store, "RPT-PROGRESS")
        with pytest.raises(InvalidTransitionError):
            lifecycle.assign("RPT-PROGRESS", "staff-2")
        assert stored(store, "RPT-PROGRESS") == before

    def test_assign_unknown_report(self, lifecycle):
        with pytest.raises(ReportNotFoundError):
            lifecycle.assign("RPT-MISSING", "staff-1")

    def test_assign_unknown_staff_leaves_report_untouched(self, lifecycle, store):
        before = stored(store, "RPT-PENDING")
        with pytest.raises(StaffNotFoundError):
            lifecycle.assign("RPT-PENDING", "staff-missing")
        assert stored(store, "RPT-PENDING") == before

    def test_non_staff_user_cannot_be_assigned(self, lifecycle):
        with pytest.raises(StaffNotFoundError):
            lifecycle.assign("RPT-PENDING", "student-1")


class TestReassign:

    def test_reassign_clears_resolution_claim(self, lifecycle, store):
        report = lifecycle.reassign("RPT-REVIEW", "staff-2")

        assert report.status == "In Progress"
        assert report.assigned_to == "meiling@uni.edu.my"
        doc = stored(store, "RPT-REVIEW")
        assert doc["resolutionImage"] is None
        assert doc["resolutionNote"] is None
        assert doc["resolutionTimestamp"] is None
        assert doc["pendingReview"] is False
        assert doc["assignedAt"] == NOW_UTC

    def test_reassign_resolved_report_is_refused(self, lifecycle, store):
        before = stored(store, "RPT-RESOLVED")
        with pytest.raises(InvalidTransitionError):
            lifecycle.reassign("RPT-RESOLVED", "staff-1")
        assert stored(store, "RPT-RESOLVED") == before

    @pytest.mark.parametrize("report_id", ["RPT-PENDING", "RPT-REJECTED"])
    def test_assign_then_reassign_leaves_no_resolution(self, lifecycle, store, report_id):
        store.update(settings.reports_collection, report_id, {"assignedTo": None})
        lifecycle.assign(report_id, "staff-1")
        lifecycle.reassign(report_id, "staff-3")

        doc = stored(store, report_id)
        assert doc["status"] == "In Progress"
        assert doc["assignedTo"] == "ravi@uni.edu.my"
        assert doc["resolutionImage"] is None
        assert doc["resolutionNote"] is None
        assert doc["resolutionTimestamp"] is None
        assert doc["pendingReview"] is False

    def test_rejected_report_can_be_reassigned(self, lifecycle):
        report = lifecycle.reassign("RPT-REJECTED", "staff-1")
        assert report.status == "In Progress"
        assert report.assigned_to == "aiman@uni.edu.my"


class TestUpdateStatus:

    @pytest.mark.parametrize("new_status", ["Pending", "In Progress", "Resolved"])
    def test_override_to_allowed_status(self, lifecycle, new_status):
        report = lifecycle.update_status("RPT-PROGRESS", new_status)
        assert report.status == new_status

    @pytest.mark.parametrize("new_status", ["Pending Review", "Rejected", "Done", ""])
    def test_override_to_other_status_is_a_validation_error(self, lifecycle, store, new_status):
        before = stored(store, "RPT-PROGRESS")
        with pytest.raises(ValidationError):
            lifecycle.update_status("RPT-PROGRESS", new_status)
        assert stored(store, "RPT-PROGRESS") == before

    def test_unchanged_status_is_a_noop(self, lifecycle, store):
        events = []
        subscription = store.subscribe(settings.reports_collection, events.append)
        lifecycle.update_status("RPT-PENDING", "Pending")
        subscription.close()
        # Only the initial snapshot, no write
        assert len(events) == 1

    def test_resolved_report_status_is_locked(self, lifecycle):
        with pytest.raises(InvalidTransitionError):
            lifecycle.update_status("RPT-RESOLVED", "Pending")

    def test_accepts_enum_values(self, lifecycle):
        report = lifecycle.update_status("RPT-PENDING", ReportStatus.IN_PROGRESS)
        assert report.status == "In Progress"


class TestResolve:

    def test_resolve_stamps_resolved_at(self, lifecycle, store):
        report = lifecycle.resolve("RPT-REVIEW")
        assert report.status == "Resolved"
        doc = stored(store, "RPT-REVIEW")
        assert doc["resolvedAt"] == NOW_UTC
        assert doc["pendingReview"] is False

    def test_resolve_unknown_report(self, lifecycle):
        with pytest.raises(ReportNotFoundError):
            lifecycle.resolve("RPT-MISSING")


class TestReview:

    def test_approve(self, lifecycle, store, actor):
        report = lifecycle.review("RPT-REVIEW", "approve", actor=actor)
        assert report.status == "Resolved"
        doc = stored(store, "RPT-REVIEW")
        assert doc["reviewedAt"] == NOW_UTC
        assert doc["reviewedBy"] == "admin@uni.edu.my"
        assert doc["reviewNote"] == ""
        assert doc["pendingReview"] is False

    def test_reject_with_note(self, lifecycle, store):
        report = lifecycle.review("RPT-REVIEW", ReviewDecision.REJECT, note="Photo is blurry")
        assert report.status == "Rejected"
        doc = stored(store, "RPT-REVIEW")
        assert doc["reviewNote"] == "Photo is blurry"
        assert doc["reviewedBy"] == "admin"

    def test_review_requires_pending_review(self, lifecycle):
        with pytest.raises(InvalidTransitionError):
            lifecycle.review("RPT-PROGRESS", "approve")

    def test_unknown_decision(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.review("RPT-REVIEW", "maybe")


class TestTransitionRules:

    def test_status_comparison_ignores_case(self):
        assert rules.status_is("resolved", ReportStatus.RESOLVED)
        assert rules.status_is(" In progress ", ReportStatus.IN_PROGRESS)
        assert not rules.status_is(None, ReportStatus.PENDING)

    def test_guards(self):
        unassigned = Report.model_validate(make_report("R1"))
        resolved = Report.model_validate(make_report("R2", status="Resolved", assignedTo="a@b.c"))
        review = Report.model_validate(make_report("R3", status="Pending Review", assignedTo="a@b.c"))

        assert rules.can_assign(unassigned)
        assert not rules.can_assign(resolved)
        assert not rules.can_reassign(resolved)
        assert rules.can_reassign(review)
        assert rules.can_review(review)
        assert not rules.can_review(unassigned)
        assert not rules.can_override_status(resolved)


class TestStoreFailure:

    def test_failed_write_surfaces_once_without_retry(self, failing_store, clock):
        lifecycle = ReportLifecycle(failing_store, clock=clock)
        with pytest.raises(StoreError) as exc_info:
            lifecycle.assign("RPT-PENDING", "staff-1")

        assert exc_info.value.http_status == 502
        assert failing_store.write_attempts == 1
        assert stored(failing_store, "RPT-PENDING")["status"] == "Pending"

    def test_guard_failures_never_reach_the_store(self, failing_store):
        with pytest.raises(InvalidTransitionError):
            ReportLifecycle(failing_store).reassign("RPT-RESOLVED", "staff-1")
        assert failing_store.write_attempts == 0
