"""Report Views - page projections built from the report set"""
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional, Sequence

from . import aggregator as agg
from ..config.settings import settings
from ..domain.enums import DateRangeMode, ReportStatus, SortDirection
from ..domain.models import Report
from ..utils.time import get_zone


def serialize_report(report: Report) -> Dict[str, Any]:
    """Store-shaped JSON for a report plus the derived display fields"""
    data = report.model_dump(mode="json", by_alias=True)
    data["shortId"] = report.short_id
    data["displayCategory"] = report.display_category
    data["locationSummary"] = report.location_summary
    data["resolverEmail"] = report.resolver_email
    data["reporterWhatsappUrl"] = report.reporter_whatsapp_url
    return data


def build_dashboard(
    reports: Sequence[Report],
    mode: Optional[str] = DateRangeMode.ALL.value,
    category: Optional[str] = "all",
    type: Optional[str] = "all",
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Dict[str, Any]:
    """
    KPI cards and recent activity for the landing page.

    The percent change always compares the unfiltered report set for the
    active period against the period before it.
    """
    zone = tz or get_zone()
    in_range = agg.filter_by_date_range(reports, mode, now=now, tz=zone)
    filtered = agg.filter_by_attributes(in_range, category=category, type=type)
    recent = agg.sort_records(filtered, "timestamp", SortDirection.DESC)[:settings.recent_reports_limit]

    return {
        "filters": {"mode": mode, "category": category, "type": type},
        "total": len(filtered),
        "ongoing": sum(1 for r in filtered if agg.is_ongoing(r)),
        "resolved": sum(1 for r in filtered if agg.is_resolved(r)),
        "percent_change": agg.period_change(reports, mode, now=now, tz=zone),
        "recent_reports": [serialize_report(r) for r in recent],
        "type_options": agg.unique_values(reports, "type"),
        "category_options": agg.unique_values(reports, agg.display_category),
    }


def build_analytics(
    reports: Sequence[Report],
    mode: Optional[str] = DateRangeMode.ALL.value,
    custom_range: Any = None,
    location: Optional[str] = "all",
    type: Optional[str] = "all",
    status: Optional[str] = "all",
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Dict[str, Any]:
    """
    Analytics page: KPIs and chart series.

    ``location`` filters on the report category (Dorm, Faculty, ...),
    ``type`` on the issue type.
    """
    zone = tz or get_zone()
    now = agg.localize_now(now, zone)
    in_range = agg.filter_by_date_range(reports, mode, custom_range=custom_range, now=now, tz=zone)
    filtered = agg.filter_by_attributes(in_range, category=location, type=type, status=status)

    by_type = agg.group_count(filtered, lambda r: r.type)
    overdue_reports = agg.overdue(filtered, days=settings.overdue_days, now=now)

    return {
        "filters": {"mode": mode, "location": location, "type": type, "status": status},
        "kpis": {
            "total": len(filtered),
            "open": sum(1 for r in filtered if not agg.is_resolved(r)),
            "resolved": sum(1 for r in filtered if agg.is_resolved(r)),
            "this_week": len(agg.filter_by_date_range(filtered, DateRangeMode.WEEK, now=now, tz=zone)),
            "this_month": len(agg.filter_by_date_range(filtered, DateRangeMode.MONTH, now=now, tz=zone)),
            "overdue": len(overdue_reports),
        },
        "by_type": _series(by_type.items()),
        "by_status": _series(agg.group_count(filtered, lambda r: r.status).items()),
        "by_location": _series(agg.group_count(filtered, agg.display_category).items()),
        "top_issues": _series(agg.top_n(by_type, settings.top_issues_limit)),
        "over_time": _series(agg.count_by_day(filtered, tz=zone)),
        "overdue_reports": [serialize_report(r) for r in overdue_reports],
        "options": {
            "locations": agg.unique_values(reports, agg.display_category),
            "types": agg.unique_values(reports, "type"),
            "statuses": agg.unique_values(reports, "status"),
        },
    }


def build_reports_table(
    reports: Sequence[Report],
    search: Optional[str] = None,
    category: Optional[str] = "all",
    type: Optional[str] = "all",
    status: Optional[str] = "all",
    sort_field: str = "timestamp",
    sort_direction: str = SortDirection.DESC.value,
    page: int = 1,
    page_size: Optional[int] = None
) -> Dict[str, Any]:
    """Searchable, filterable, sortable and paginated report table"""
    page_size = page_size or settings.default_page_size
    matched = agg.search_records(reports, search)
    matched = agg.filter_by_attributes(matched, category=category, type=type, status=status)
    ordered = agg.sort_records(matched, sort_field, sort_direction)

    return {
        "items": [serialize_report(r) for r in agg.paginate(ordered, page, page_size)],
        "page": page,
        "page_size": page_size,
        "total": len(ordered),
        "total_pages": agg.total_pages(len(ordered), page_size),
        "options": {
            "categories": agg.unique_values(reports, agg.display_category),
            "types": agg.unique_values(reports, "type"),
            "statuses": agg.unique_values(reports, "status"),
        },
    }


def pending_review_reports(reports: Sequence[Report]) -> List[Report]:
    """Reports whose staff-submitted resolution awaits an admin decision"""
    pending = ReportStatus.PENDING_REVIEW.value.lower()
    return [r for r in reports if agg.status_of(r) == pending]


def build_pending_reviews(reports: Sequence[Report]) -> Dict[str, Any]:
    items = agg.sort_records(pending_review_reports(reports), "resolutionTimestamp", SortDirection.DESC)
    return {
        "items": [serialize_report(r) for r in items],
        "total": len(items),
    }


def _series(pairs: Any) -> List[Dict[str, Any]]:
    return [{"label": label, "count": count} for label, count in pairs]
