"""
Admin API Schemas

Request and response models for the admin console endpoints.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ...domain.enums import ReviewDecision


# =============================================================================
# Report Schemas
# =============================================================================

class AssignRequest(BaseModel):
    """Request to assign or reassign a report"""
    staff_id: str = Field(..., min_length=1, description="User ID of the staff member")


class StatusUpdateRequest(BaseModel):
    """Request to override a report or ticket status"""
    status: str = Field(..., min_length=1)


class ReviewRequest(BaseModel):
    """Admin decision on a staff-submitted resolution"""
    decision: ReviewDecision
    note: Optional[str] = Field(None, max_length=2000)


class ReportListResponse(BaseModel):
    """Paginated report table"""
    items: List[Dict[str, Any]]
    page: int
    page_size: int
    total: int
    total_pages: int
    options: Dict[str, List[Any]] = Field(default_factory=dict)


class ExportResponse(BaseModel):
    """Plain rows for the PDF/CSV exporters"""
    headers: List[str]
    rows: List[List[str]]


# =============================================================================
# Ticket Schemas
# =============================================================================

class AddResponseRequest(BaseModel):
    """Admin reply on a support ticket"""
    message: str = Field(..., max_length=5000)
    author: Optional[str] = Field(None, max_length=200)


class TicketListResponse(BaseModel):
    """Paginated support ticket table"""
    items: List[Dict[str, Any]]
    page: int
    page_size: int
    total: int
    total_pages: int
    status_counts: Dict[str, int]
    options: Dict[str, List[Any]] = Field(default_factory=dict)


# =============================================================================
# Staff Schemas
# =============================================================================

class StaffOption(BaseModel):
    """Staff member as shown in the assignment picker"""
    id: str
    email: Optional[str] = None
    label: Optional[str] = None
    department: str
