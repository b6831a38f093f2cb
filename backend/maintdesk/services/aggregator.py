"""View Aggregator - pure projections over the live record set

Every function here takes the full current record set and returns a new
derived value; nothing touches the store. Records may be domain models or
raw store mappings. Malformed records (missing timestamp, missing field)
are excluded from a projection rather than raising.
"""
import math
from datetime import datetime, timedelta, tzinfo
from typing import (
    Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence,
    Tuple, TypeVar, Union
)
from dateutil.relativedelta import relativedelta

from ..domain.enums import DateRangeMode, ReportStatus, SortDirection
from ..domain.errors import ValidationError
from ..domain.models import CustomDateRange, StoreRecord, read_field
from ..utils.time import days_between, end_of_day, get_zone, start_of_day, to_datetime

RecordT = TypeVar("RecordT", StoreRecord, Mapping[str, Any])
RecordLike = Union[StoreRecord, Mapping[str, Any]]
KeyT = TypeVar("KeyT", bound=Hashable)

# Fields holding timestamps, by store name and attribute name
TIMESTAMP_FIELDS = frozenset({
    "timestamp", "assignedAt", "assigned_at", "resolutionTimestamp", "resolution_timestamp",
    "resolvedAt", "resolved_at", "reviewedAt", "reviewed_at", "createdAt", "created_at",
    "updatedAt", "updated_at", "lastResponseAt", "last_response_at",
})

# Active period -> the equivalent period immediately before it
PREVIOUS_PERIOD = {
    DateRangeMode.TODAY: DateRangeMode.YESTERDAY,
    DateRangeMode.WEEK: DateRangeMode.LAST_WEEK,
    DateRangeMode.MONTH: DateRangeMode.LAST_MONTH,
}

EXPORT_HEADERS = ["Report ID", "Category", "Type", "Status", "Date/Time"]


# =============================================================================
# Field access
# =============================================================================

def record_timestamp(record: RecordLike, field: str = "timestamp") -> Optional[datetime]:
    """Creation (or other) timestamp as an aware datetime, None when invalid"""
    return to_datetime(read_field(record, field))


def record_text(record: RecordLike, field: str) -> Optional[str]:
    value = read_field(record, field)
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def record_id(record: RecordLike) -> str:
    return str(read_field(record, "id") or "")


def display_category(record: RecordLike) -> Optional[str]:
    """Lowercased category with a capital first letter ("dorm" -> "Dorm")"""
    category = normalize_category(record_text(record, "category"))
    return category[0].upper() + category[1:] if category else None


def normalize_category(category: Optional[str]) -> Optional[str]:
    return category.strip().lower() if category and category.strip() else None


def status_of(record: RecordLike) -> str:
    return (record_text(record, "status") or "").strip().lower()


def is_resolved(record: RecordLike) -> bool:
    return status_of(record) == ReportStatus.RESOLVED.value.lower()


def is_ongoing(record: RecordLike) -> bool:
    """Pending or In Progress"""
    return status_of(record) in (ReportStatus.PENDING.value.lower(), ReportStatus.IN_PROGRESS.value.lower())


# =============================================================================
# Filters
# =============================================================================

def _parse_mode(mode: Union[str, DateRangeMode]) -> DateRangeMode:
    if isinstance(mode, DateRangeMode):
        return mode
    try:
        return DateRangeMode(mode)
    except ValueError:
        raise ValidationError(
            f"Unknown date range: {mode}",
            details={"mode": mode, "allowed": [m.value for m in DateRangeMode]}
        )


def _parse_custom_range(custom_range: Any) -> CustomDateRange:
    if isinstance(custom_range, CustomDateRange):
        parsed = custom_range
    elif isinstance(custom_range, Mapping):
        parsed = CustomDateRange(
            start_date=custom_range.get("start_date", custom_range.get("startDate")),
            end_date=custom_range.get("end_date", custom_range.get("endDate")),
        )
    else:
        parsed = CustomDateRange()
    if parsed.start_date is None or parsed.end_date is None:
        raise ValidationError(
            "Custom date range needs both a start date and an end date",
            details={"start_date": parsed.start_date, "end_date": parsed.end_date}
        )
    return parsed


def date_range_predicate(
    mode: Union[str, DateRangeMode],
    now: datetime,
    zone: tzinfo,
    custom_range: Any = None
) -> Callable[[datetime], bool]:
    """Build the in-range test for one mode. ``now`` must already be in ``zone``."""
    mode = _parse_mode(mode)

    if mode == DateRangeMode.TODAY:
        today = now.date()
        return lambda d: d.date() == today
    if mode == DateRangeMode.YESTERDAY:
        yesterday = (now - timedelta(days=1)).date()
        return lambda d: d.date() == yesterday
    if mode == DateRangeMode.WEEK:
        week_ago = now - timedelta(days=7)
        return lambda d: week_ago <= d <= now
    if mode == DateRangeMode.LAST_WEEK:
        two_weeks_ago = now - timedelta(days=14)
        week_ago = now - timedelta(days=7)
        return lambda d: two_weeks_ago <= d < week_ago
    if mode == DateRangeMode.MONTH:
        return lambda d: (d.year, d.month) == (now.year, now.month)
    if mode == DateRangeMode.LAST_MONTH:
        previous = now + relativedelta(months=-1)
        return lambda d: (d.year, d.month) == (previous.year, previous.month)
    if mode == DateRangeMode.YEAR:
        return lambda d: d.year == now.year
    if mode == DateRangeMode.CUSTOM:
        parsed = _parse_custom_range(custom_range)
        start = start_of_day(parsed.start_date, zone)
        end = end_of_day(parsed.end_date, zone)
        return lambda d: start <= d <= end
    return lambda d: True


def filter_by_date_range(
    records: Iterable[RecordT],
    mode: Optional[Union[str, DateRangeMode]],
    custom_range: Any = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    field: str = "timestamp"
) -> List[RecordT]:
    """
    Keep records whose timestamp falls in the window.

    ``mode=None`` applies no filter. Under every mode, including ``all``,
    records without a valid timestamp are dropped. Calendar modes (today,
    month, ...) are evaluated in ``tz``, the configured zone by default.
    The custom range needs both dates and includes the whole end day.
    """
    if mode is None:
        return list(records)
    zone = tz or get_zone()
    now = localize_now(now, zone)
    in_range = date_range_predicate(mode, now, zone, custom_range)

    result = []
    for record in records:
        ts = record_timestamp(record, field)
        if ts is not None and in_range(ts.astimezone(zone)):
            result.append(record)
    return result


def localize_now(now: Optional[datetime], zone: tzinfo) -> datetime:
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


def _is_all(value: Optional[str]) -> bool:
    return value is None or not str(value).strip() or str(value).strip().lower() == "all"


def filter_by_attributes(
    records: Iterable[RecordT],
    category: Optional[str] = "all",
    type: Optional[str] = "all",
    status: Optional[str] = "all"
) -> List[RecordT]:
    """
    Exact-match filters; "all" (or empty) disables a filter.

    Categories compare lowercase on both sides, type and status compare as
    stored.
    """
    wanted_category = None if _is_all(category) else normalize_category(category)
    wanted_type = None if _is_all(type) else type
    wanted_status = None if _is_all(status) else status

    result = []
    for record in records:
        if wanted_category is not None and normalize_category(record_text(record, "category")) != wanted_category:
            continue
        if wanted_type is not None and read_field(record, "type") != wanted_type:
            continue
        if wanted_status is not None and read_field(record, "status") != wanted_status:
            continue
        result.append(record)
    return result


def search_records(
    records: Iterable[RecordT],
    text: Optional[str],
    fields: Sequence[str] = ("id", "category", "type", "status")
) -> List[RecordT]:
    """Case-insensitive substring search over the given fields"""
    if not text or not text.strip():
        return list(records)
    needle = text.strip().lower()
    return [
        record for record in records
        if any(needle in (record_text(record, field) or "").lower() for field in fields)
    ]


# =============================================================================
# Grouping
# =============================================================================

def group_count(
    records: Iterable[RecordT],
    key_fn: Callable[[RecordT], Optional[KeyT]]
) -> Dict[KeyT, int]:
    """Count records per derived key, in first-seen key order. Empty keys are skipped."""
    counts: Dict[KeyT, int] = {}
    for record in records:
        key = key_fn(record)
        if key is None or key == "":
            continue
        counts[key] = counts.get(key, 0) + 1
    return counts


def top_n(counts: Mapping[KeyT, int], n: int) -> List[Tuple[KeyT, int]]:
    """Largest groups first; ties keep first-seen order"""
    if n <= 0:
        return []
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:n]


def unique_values(
    records: Iterable[RecordT],
    key: Union[str, Callable[[RecordT], Any]]
) -> List[Any]:
    """Distinct non-empty values in first-seen order (dropdown options)"""
    key_fn = key if callable(key) else (lambda record: read_field(record, key))
    return list(group_count(records, key_fn).keys())


def count_by_day(
    records: Iterable[RecordT],
    tz: Optional[tzinfo] = None,
    field: str = "timestamp"
) -> List[Tuple[str, int]]:
    """Records per local calendar day, oldest day first"""
    zone = tz or get_zone()

    def day_key(record: RecordT) -> Optional[str]:
        ts = record_timestamp(record, field)
        return ts.astimezone(zone).date().isoformat() if ts else None

    return sorted(group_count(records, day_key).items())


# =============================================================================
# Period comparison
# =============================================================================

def percent_change(current: float, previous: float) -> float:
    """
    Relative change in percent, one decimal.

    With no previous activity any current activity counts as +100%.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def period_change(
    records: Sequence[RecordT],
    mode: Optional[Union[str, DateRangeMode]],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> float:
    """
    Change between the active period and the one before it.

    today vs yesterday, week vs last week, month vs last month; any other
    mode has nothing to compare against and yields 0.
    """
    if mode is None:
        return 0.0
    mode = _parse_mode(mode)
    previous_mode = PREVIOUS_PERIOD.get(mode)
    if previous_mode is None:
        return 0.0
    zone = tz or get_zone()
    now = localize_now(now, zone)
    current = len(filter_by_date_range(records, mode, now=now, tz=zone))
    previous = len(filter_by_date_range(records, previous_mode, now=now, tz=zone))
    return percent_change(current, previous)


def overdue(
    records: Iterable[RecordT],
    days: float = 7,
    now: Optional[datetime] = None
) -> List[RecordT]:
    """Unresolved records older than ``days``"""
    now = now or datetime.now(get_zone())
    result = []
    for record in records:
        if is_resolved(record):
            continue
        ts = record_timestamp(record)
        if ts is not None and days_between(ts, now) > days:
            result.append(record)
    return result


# =============================================================================
# Sorting & paging
# =============================================================================

def _sort_value(record: RecordLike, field: str) -> Optional[Tuple[int, Any]]:
    """Comparable key, or None when the field is missing"""
    raw = read_field(record, field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if (
        field in TIMESTAMP_FIELDS
        or isinstance(raw, datetime)
        or hasattr(raw, "toDate")
        or hasattr(raw, "to_datetime")
    ):
        ts = to_datetime(raw)
        return (1, ts) if ts is not None else None
    if isinstance(raw, bool):
        return (0, int(raw))
    if isinstance(raw, (int, float)):
        return (0, raw)
    return (2, str(raw))


def sort_records(
    records: Iterable[RecordT],
    field: str,
    direction: Union[str, SortDirection] = SortDirection.ASC
) -> List[RecordT]:
    """
    Stable sort on one field.

    Records missing the field go last in both directions; timestamps compare
    as instants whatever form they are stored in.
    """
    descending = str(getattr(direction, "value", direction)).lower() == SortDirection.DESC.value
    present: List[Tuple[Tuple[int, Any], RecordT]] = []
    missing: List[RecordT] = []
    for record in records:
        value = _sort_value(record, field)
        if value is None:
            missing.append(record)
        else:
            present.append((value, record))
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [record for _, record in present] + missing


def paginate(records: Sequence[RecordT], page: int, page_size: int) -> List[RecordT]:
    """1-indexed page slice; pages past the end (or below 1) are empty"""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(records[start:start + page_size])


def total_pages(total: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(total / page_size)


# =============================================================================
# Export
# =============================================================================

def export_rows(records: Iterable[RecordLike], tz: Optional[tzinfo] = None) -> List[List[str]]:
    """Plain table rows for the PDF/CSV exporters, matching EXPORT_HEADERS"""
    zone = tz or get_zone()
    rows = []
    for record in records:
        ts = record_timestamp(record)
        rows.append([
            record_id(record)[-5:],
            record_text(record, "category") or "",
            record_text(record, "type") or "",
            record_text(record, "status") or "",
            ts.astimezone(zone).strftime("%Y-%m-%d %H:%M:%S") if ts else "",
        ])
    return rows
