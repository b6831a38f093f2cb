"""View aggregator: date ranges, attribute filters, grouping, sorting, paging"""
from datetime import date, datetime, timedelta, timezone

import pytest

from maintdesk.domain.enums import DateRangeMode, SortDirection
from maintdesk.domain.errors import ValidationError
from maintdesk.domain.models import CustomDateRange, Report
from maintdesk.services import aggregator as agg

from .conftest import KL, NOW, make_report


def reports_at(*offsets):
    """Reports stamped ``now - offset`` (offsets are timedeltas)"""
    return [make_report(f"R{i}", timestamp=NOW - offset) for i, offset in enumerate(offsets)]


def ids(records):
    return [agg.record_id(r) for r in records]


class TestPercentChange:

    @pytest.mark.parametrize("current, previous, expected", [
        (0, 0, 0),
        (5, 0, 100),
        (15, 10, 50.0),
        (5, 10, -50.0),
        (1, 3, -66.7),
    ])
    def test_percent_change(self, current, previous, expected):
        assert agg.percent_change(current, previous) == expected

    def test_period_change_compares_with_previous_week(self):
        records = reports_at(timedelta(days=1), timedelta(days=2), timedelta(days=9))
        # two this week, one last week
        assert agg.period_change(records, "week", now=NOW, tz=KL) == 100.0

    def test_period_change_without_previous_period(self):
        records = reports_at(timedelta(days=1))
        assert agg.period_change(records, "all", now=NOW, tz=KL) == 0.0
        assert agg.period_change(records, None, now=NOW, tz=KL) == 0.0


class TestDateRange:

    def test_week_excludes_eight_days_ago_and_includes_now(self):
        records = reports_at(timedelta(0), timedelta(days=8))
        assert ids(agg.filter_by_date_range(records, "week", now=NOW, tz=KL)) == ["R0"]

    def test_last_week_window(self):
        records = reports_at(timedelta(days=7), timedelta(days=7, seconds=1), timedelta(days=13), timedelta(days=14, seconds=1))
        result = agg.filter_by_date_range(records, DateRangeMode.LAST_WEEK, now=NOW, tz=KL)
        assert ids(result) == ["R1", "R2"]

    def test_today_and_yesterday_use_local_calendar(self):
        # 00:30 local on the 15th is still the 14th in UTC
        early = datetime(2024, 6, 15, 0, 30, tzinfo=KL).astimezone(timezone.utc)
        late_yesterday = datetime(2024, 6, 14, 23, 59, tzinfo=KL)
        records = [make_report("early", timestamp=early), make_report("yday", timestamp=late_yesterday)]

        assert ids(agg.filter_by_date_range(records, "today", now=NOW, tz=KL)) == ["early"]
        assert ids(agg.filter_by_date_range(records, "yesterday", now=NOW, tz=KL)) == ["yday"]

    def test_month_and_last_month(self):
        records = [
            make_report("june", timestamp=datetime(2024, 6, 1, 8, 0, tzinfo=KL)),
            make_report("may", timestamp=datetime(2024, 5, 31, 23, 0, tzinfo=KL)),
            make_report("last-june", timestamp=datetime(2023, 6, 10, tzinfo=KL)),
        ]
        assert ids(agg.filter_by_date_range(records, "month", now=NOW, tz=KL)) == ["june"]
        assert ids(agg.filter_by_date_range(records, "lastMonth", now=NOW, tz=KL)) == ["may"]
        assert ids(agg.filter_by_date_range(records, "year", now=NOW, tz=KL)) == ["june", "may"]

    def test_last_month_across_year_boundary(self):
        january = datetime(2024, 1, 10, tzinfo=KL)
        records = [make_report("dec", timestamp=datetime(2023, 12, 31, 12, tzinfo=KL))]
        assert ids(agg.filter_by_date_range(records, "lastMonth", now=january, tz=KL)) == ["dec"]

    def test_custom_range_includes_whole_end_day(self):
        records = [
            make_report("start", timestamp=datetime(2024, 6, 1, 0, 0, tzinfo=KL)),
            make_report("end", timestamp=datetime(2024, 6, 10, 23, 59, 59, tzinfo=KL)),
            make_report("after", timestamp=datetime(2024, 6, 11, 0, 0, tzinfo=KL)),
            make_report("before", timestamp=datetime(2024, 5, 31, 23, 59, tzinfo=KL)),
        ]
        custom = CustomDateRange(start_date=date(2024, 6, 1), end_date=date(2024, 6, 10))
        result = agg.filter_by_date_range(records, "custom", custom_range=custom, now=NOW, tz=KL)
        assert ids(result) == ["start", "end"]

    def test_custom_range_accepts_mapping(self):
        records = reports_at(timedelta(0))
        result = agg.filter_by_date_range(
            records, "custom", custom_range={"startDate": "2024-06-15", "endDate": "2024-06-15"}, now=NOW, tz=KL
        )
        assert ids(result) == ["R0"]

    @pytest.mark.parametrize("custom", [None, {"start_date": date(2024, 6, 1)}, CustomDateRange()])
    def test_custom_range_requires_both_dates(self, custom):
        with pytest.raises(ValidationError):
            agg.filter_by_date_range(reports_at(timedelta(0)), "custom", custom_range=custom, now=NOW, tz=KL)

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            agg.filter_by_date_range([], "fortnight", now=NOW, tz=KL)

    def test_records_without_timestamp_are_excluded(self):
        records = [
            make_report("ok"),
            make_report("missing", timestamp=None),
            make_report("garbage", timestamp="not a date"),
        ]
        assert ids(agg.filter_by_date_range(records, "all", now=NOW, tz=KL)) == ["ok"]

    def test_no_mode_means_no_filter(self):
        records = [make_report("ok"), make_report("missing", timestamp=None)]
        assert ids(agg.filter_by_date_range(records, None)) == ["ok", "missing"]

    def test_store_timestamp_shapes(self):
        epoch = NOW.timestamp()
        records = [
            make_report("dict", timestamp={"seconds": int(epoch), "nanoseconds": 0}),
            make_report("millis", timestamp=int(epoch * 1000)),
            make_report("iso", timestamp=NOW.isoformat()),
        ]
        assert ids(agg.filter_by_date_range(records, "today", now=NOW, tz=KL)) == ["dict", "millis", "iso"]

    def test_works_on_models(self):
        records = [Report.model_validate(doc) for doc in reports_at(timedelta(0), timedelta(days=8))]
        assert ids(agg.filter_by_date_range(records, "week", now=NOW, tz=KL)) == ["R0"]


class TestAttributeFilters:

    def test_all_disables_filters(self):
        records = [make_report("a"), make_report("b", category="faculty")]
        assert len(agg.filter_by_attributes(records)) == 2

    def test_category_is_case_insensitive(self):
        records = [make_report("a", category="Dorm"), make_report("b", category="faculty")]
        assert ids(agg.filter_by_attributes(records, category="dorm")) == ["a"]
        assert ids(agg.filter_by_attributes(records, category="FACULTY")) == ["b"]

    def test_type_and_status_are_exact(self):
        records = [
            make_report("a", type="Electrical", status="Pending"),
            make_report("b", type="Plumbing", status="Pending"),
            make_report("c", type="Electrical", status="Resolved"),
        ]
        assert ids(agg.filter_by_attributes(records, type="Electrical", status="Pending")) == ["a"]
        assert ids(agg.filter_by_attributes(records, status="pending")) == []

    def test_search_over_id_category_type_status(self):
        records = [
            make_report("RPT-ABC12", type="Plumbing"),
            make_report("RPT-XYZ99", category="faculty", status="Resolved"),
        ]
        assert ids(agg.search_records(records, "abc")) == ["RPT-ABC12"]
        assert ids(agg.search_records(records, "FACULTY")) == ["RPT-XYZ99"]
        assert ids(agg.search_records(records, "resolved")) == ["RPT-XYZ99"]
        assert len(agg.search_records(records, "  ")) == 2


class TestGrouping:

    def test_normalized_category_groups(self):
        records = [
            make_report("a", category="dorm"),
            make_report("b", category="Dorm"),
            make_report("c", category="FACULTY"),
        ]
        assert agg.group_count(records, agg.display_category) == {"Dorm": 2, "Faculty": 1}

    def test_empty_keys_are_skipped(self):
        records = [make_report("a", type=""), make_report("b", type=None), make_report("c")]
        assert agg.group_count(records, lambda r: r["type"]) == {"Electrical": 1}

    def test_top_n_keeps_first_seen_order_on_ties(self):
        counts = {"Plumbing": 2, "Electrical": 3, "Furniture": 2, "Lift": 1}
        assert agg.top_n(counts, 3) == [("Electrical", 3), ("Plumbing", 2), ("Furniture", 2)]
        assert agg.top_n(counts, 0) == []

    def test_unique_values(self):
        records = [make_report("a", type="Lift"), make_report("b"), make_report("c", type="Lift")]
        assert agg.unique_values(records, "type") == ["Lift", "Electrical"]

    def test_count_by_day_is_chronological_in_local_time(self):
        records = [
            make_report("a", timestamp=datetime(2024, 6, 15, 0, 30, tzinfo=KL)),
            make_report("b", timestamp=datetime(2024, 6, 13, 9, 0, tzinfo=KL)),
            make_report("c", timestamp=datetime(2024, 6, 15, 18, 0, tzinfo=KL)),
            make_report("d", timestamp=None),
        ]
        assert agg.count_by_day(records, tz=KL) == [("2024-06-13", 1), ("2024-06-15", 2)]

    def test_overdue(self):
        records = [
            make_report("old", timestamp=NOW - timedelta(days=8)),
            make_report("old-resolved", timestamp=NOW - timedelta(days=8), status="Resolved"),
            make_report("fresh", timestamp=NOW - timedelta(days=6)),
        ]
        assert ids(agg.overdue(records, days=7, now=NOW)) == ["old"]


class TestSortAndPaginate:

    def test_missing_values_sort_last_in_both_directions(self):
        records = [
            make_report("b", timestamp=NOW - timedelta(days=1)),
            make_report("none", timestamp=None),
            make_report("a", timestamp=NOW),
        ]
        assert ids(agg.sort_records(records, "timestamp", "asc")) == ["b", "a", "none"]
        assert ids(agg.sort_records(records, "timestamp", SortDirection.DESC)) == ["a", "b", "none"]

    def test_mixed_timestamp_shapes_compare_as_instants(self):
        records = [
            make_report("iso", timestamp=(NOW - timedelta(hours=1)).isoformat()),
            make_report("dt", timestamp=NOW),
            make_report("dict", timestamp={"seconds": int((NOW - timedelta(hours=2)).timestamp())}),
        ]
        assert ids(agg.sort_records(records, "timestamp", "desc")) == ["dt", "iso", "dict"]

    def test_sort_is_stable(self):
        records = [make_report("x", type="Lift"), make_report("y", type="Lift"), make_report("z", type="Door")]
        assert ids(agg.sort_records(records, "type", "asc")) == ["z", "x", "y"]

    def test_paginate(self):
        records = list(range(25))
        assert agg.paginate(records, page=3, page_size=10) == [20, 21, 22, 23, 24]
        assert agg.paginate(records, page=10, page_size=10) == []
        assert agg.paginate(records, page=0, page_size=10) == []
        assert agg.paginate(records, page=1, page_size=10) == list(range(10))

    def test_total_pages(self):
        assert agg.total_pages(25, 10) == 3
        assert agg.total_pages(0, 10) == 0
        assert agg.total_pages(20, 10) == 2


class TestExport:

    def test_export_rows(self):
        records = [make_report("RPT-00042", category="dorm", timestamp=datetime(2024, 6, 15, 9, 5, tzinfo=KL))]
        assert agg.export_rows(records, tz=KL) == [["00042", "dorm", "Electrical", "Pending", "2024-06-15 09:05:00"]]
        assert len(agg.EXPORT_HEADERS) == 5


class TestMalformedTimestamps:

    def test_out_of_range_seconds_are_dropped_not_raised(self):
        records = [
            make_report("huge", timestamp={"seconds": 10 ** 20}),
            make_report("ok", timestamp=NOW - timedelta(hours=1)),
        ]
        assert ids(agg.filter_by_date_range(records, "all", now=NOW, tz=KL)) == ["ok"]
        assert agg.count_by_day(records, tz=KL) == [("2024-06-15", 1)]
