"""Live projections re-run on every store change and stop after close()"""
import pytest

from maintdesk.config.settings import settings
from maintdesk.domain.errors import ValidationError
from maintdesk.domain.models import Report
from maintdesk.engine.report_lifecycle import ReportLifecycle
from maintdesk.engine.ticket_lifecycle import TicketLifecycle
from maintdesk.services.live_view import LiveProjection, create_live_view

from .conftest import make_report


def count_reports(reports):
    return len(reports)


class TestLiveProjection:

    def test_initial_snapshot_and_updates(self, store):
        results = []
        projection = LiveProjection(store, settings.reports_collection, count_reports, model=Report)
        projection.add_listener(results.append)

        with projection:
            assert results == [5]
            store.insert(settings.reports_collection, make_report("RPT-NEW"))
            assert results == [5, 6]
            assert projection.latest == 6
            assert projection.updates == 2

    def test_close_releases_subscription(self, store):
        results = []
        projection = LiveProjection(store, settings.reports_collection, count_reports)
        projection.add_listener(results.append)
        projection.start()
        assert store.subscription_count == 1

        projection.close()
        store.insert(settings.reports_collection, make_report("RPT-NEW"))

        assert store.subscription_count == 0
        assert results == [5]
        assert not projection.active

    def test_late_listener_gets_latest_result(self, store):
        projection = LiveProjection(store, settings.reports_collection, count_reports).start()
        late = []
        projection.add_listener(late.append)
        assert late == [5]
        projection.close()

    def test_records_are_parsed_into_models(self, store):
        seen = []
        projection = LiveProjection(
            store, settings.reports_collection, lambda reports: seen.extend(reports), model=Report
        )
        with projection:
            assert all(isinstance(r, Report) for r in seen)

    def test_projection_failure_goes_to_error_listeners(self, store):
        errors = []

        def broken(records):
            raise ValidationError("bad filter")

        projection = LiveProjection(store, settings.reports_collection, broken)
        projection.add_error_listener(errors.append)
        with projection:
            assert len(errors) == 1
            assert isinstance(errors[0], ValidationError)
            assert projection.latest is None

    def test_closed_projection_cannot_restart(self, store):
        projection = LiveProjection(store, settings.reports_collection, count_reports)
        projection.close()
        with pytest.raises(RuntimeError):
            projection.start()


class TestNamedViews:

    def test_pending_reviews_follow_lifecycle_actions(self, store):
        totals = []
        with create_live_view(store, "pending-reviews") as view:
            view.add_listener(lambda result: totals.append(result["total"]))
            ReportLifecycle(store).review("RPT-REVIEW", "approve")
        assert totals == [1, 0]

    def test_dashboard_view_uses_filters(self, store):
        results = []
        view = create_live_view(store, "dashboard", {"mode": "all", "category": "dorm"})
        view.add_listener(results.append)
        with view:
            ReportLifecycle(store).resolve("RPT-PENDING")
        assert [r["ongoing"] for r in results] == [2, 1]
        assert results[-1]["resolved"] == 2

    def test_tickets_view(self, store):
        results = []
        view = create_live_view(store, "tickets", {"status": "In Progress"})
        view.add_listener(results.append)
        with view:
            TicketLifecycle(store).add_response("TKT-OPEN", "On it")
        assert [r["total"] for r in results] == [0, 1]

    def test_unknown_view(self, store):
        with pytest.raises(ValidationError):
            create_live_view(store, "leaderboard")
