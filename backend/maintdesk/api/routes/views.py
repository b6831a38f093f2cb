"""
Dashboard, Analytics and Staff Routes

Read-only page projections for the admin console.
"""

from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_admin_dep, get_store_dep
from ...domain.enums import DateRangeMode
from ...domain.models import ActorContext, CustomDateRange
from ...repositories.record_store import RecordStore
from ...services.view_service import ViewService
from .schemas import StaffOption

router = APIRouter()

DATE_RANGE_PATTERN = "^(" + "|".join(m.value for m in DateRangeMode) + ")$"
# The dashboard has no date pickers
DASHBOARD_RANGE_PATTERN = "^(" + "|".join(m.value for m in DateRangeMode if m != DateRangeMode.CUSTOM) + ")$"


@router.get("/dashboard")
def get_dashboard(
    mode: str = Query(DateRangeMode.ALL.value, pattern=DASHBOARD_RANGE_PATTERN),
    category: str = Query("all"),
    type: str = Query("all"),
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """KPI cards, period change and the most recent reports"""
    return ViewService(store).dashboard(mode=mode, category=category, type=type)


@router.get("/analytics")
def get_analytics(
    mode: str = Query(DateRangeMode.ALL.value, pattern=DATE_RANGE_PATTERN),
    start_date: Optional[date] = Query(None, description="Custom range start (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Custom range end, inclusive"),
    location: str = Query("all"),
    type: str = Query("all"),
    status: str = Query("all"),
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
) -> Dict[str, Any]:
    """
    Analytics KPIs and chart series.

    ``mode=custom`` needs both start_date and end_date.
    """
    custom_range = None
    if mode == DateRangeMode.CUSTOM.value:
        custom_range = CustomDateRange(start_date=start_date, end_date=end_date)
    return ViewService(store).analytics(
        mode=mode,
        custom_range=custom_range,
        location=location,
        type=type,
        status=status
    )


@router.get("/staff", response_model=List[StaffOption])
def list_staff(
    actor: ActorContext = Depends(get_current_admin_dep),
    store: RecordStore = Depends(get_store_dep)
):
    """Staff members available for assignment"""
    return ViewService(store).staff_options()
