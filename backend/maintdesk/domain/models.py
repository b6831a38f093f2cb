"""Domain Models - Pydantic schemas for store records"""
import re
from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import AuthorType, ReportCategory, ReportStatus, TicketStatus
from ..utils.time import to_datetime


def _as_text(value: Any) -> Optional[str]:
    """Store fields are loosely typed; keep scalars as text, drop the rest"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


Text = Annotated[Optional[str], BeforeValidator(_as_text)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(to_datetime)]


# ============================================================================
# Base record
# ============================================================================

class StoreRecord(BaseModel):
    """
    A document read from the record store.

    Store field names are camelCase; attributes are snake_case with camelCase
    aliases. Unknown fields are kept so nothing written by the intake or staff
    apps is lost on the way through.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow"
    )

    id: str = Field(..., description="Store document ID")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v

    @property
    def short_id(self) -> str:
        """Last five characters of the ID, as shown in tables"""
        return self.id[-5:]

    def to_document(self) -> Dict[str, Any]:
        """Dump back to store field names"""
        return self.model_dump(by_alias=True)


def read_field(record: Union[StoreRecord, Mapping[str, Any]], field: str) -> Any:
    """
    Read a field by store name or attribute name from a model or a raw mapping.

    Returns None when the field is absent.
    """
    if isinstance(record, Mapping):
        return record.get(field)
    model_fields = type(record).model_fields
    if field in model_fields:
        return getattr(record, field)
    for name, info in model_fields.items():
        if info.alias == field:
            return getattr(record, name)
    return (record.model_extra or {}).get(field)


# ============================================================================
# Report
# ============================================================================

class GeoPoint(BaseModel):
    """Report coordinates"""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


def _as_geopoint(value: Any) -> Any:
    if value is None or isinstance(value, GeoPoint):
        return value
    if isinstance(value, dict):
        lat, lng = value.get("latitude"), value.get("longitude")
    elif hasattr(value, "latitude") and hasattr(value, "longitude"):
        lat, lng = value.latitude, value.longitude
    else:
        return None
    try:
        return {"latitude": float(lat), "longitude": float(lng)}
    except (TypeError, ValueError):
        return None


class Report(StoreRecord):
    """A filed facility-maintenance issue"""

    # Classification
    category: Text = None
    type: Text = None
    college: Text = None
    block: Text = None
    floor: Text = None
    house: Text = None
    room: Text = None
    faculty: Text = None
    location: Annotated[Optional[GeoPoint], BeforeValidator(_as_geopoint)] = None

    # Lifecycle
    status: str = ReportStatus.PENDING.value

    # Assignment
    assigned_to: Text = None
    assigned_staff_name: Text = None
    assigned_staff_department: Text = None
    assigned_at: Timestamp = None

    # Resolution and review
    resolution_image: Text = None
    resolution_note: Text = None
    resolution_timestamp: Timestamp = None
    pending_review: bool = False
    resolved_by: Text = None
    resolved_at: Timestamp = None
    reviewed_at: Timestamp = None
    review_note: Text = None
    reviewed_by: Text = None

    # Provenance
    user_email: Text = None
    reporter_full_phone: Text = None
    image_url: Text = None
    description: Text = None
    notes: Text = None
    timestamp: Timestamp = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> str:
        text = _as_text(v)
        return text if text else ReportStatus.PENDING.value

    @field_validator("pending_review", mode="before")
    @classmethod
    def _coerce_pending_review(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in {"true", "1", "yes"}
        return bool(v) if v is not None else False

    @property
    def normalized_category(self) -> Optional[str]:
        """Lowercase category used for comparisons"""
        return self.category.strip().lower() if self.category and self.category.strip() else None

    @property
    def display_category(self) -> Optional[str]:
        """Category with its first letter capitalised"""
        category = self.normalized_category
        return category[0].upper() + category[1:] if category else None

    @property
    def is_resolved(self) -> bool:
        return self.status.lower() == ReportStatus.RESOLVED.value.lower()

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_to)

    @property
    def resolver_email(self) -> Optional[str]:
        """Who resolved the report: explicit resolver, else the assignee"""
        return self.resolved_by or self.assigned_to

    @property
    def location_summary(self) -> str:
        """Human readable location for the report's category"""
        category = self.normalized_category
        if category == ReportCategory.DORM.value:
            parts = [("College", self.college), ("Block", self.block), ("Floor", self.floor),
                     ("House", self.house), ("Room", self.room)]
        elif category == ReportCategory.FACULTY.value:
            parts = [("Faculty", self.faculty), ("Floor", self.floor), ("Room", self.room)]
        else:
            parts = []
        text = ", ".join(f"{label} {value}" for label, value in parts if value)
        if text:
            return text
        if self.location and self.location.latitude is not None and self.location.longitude is not None:
            return f"{self.location.latitude:.6f}, {self.location.longitude:.6f}"
        return "N/A"

    @property
    def reporter_whatsapp_url(self) -> Optional[str]:
        return whatsapp_url(self.reporter_full_phone)


def whatsapp_url(phone: Optional[str]) -> Optional[str]:
    """
    Build a wa.me link for a Malaysian phone number.

    Non-digits are stripped, a leading 0 becomes the 60 country code, and 60
    is prefixed when missing.
    """
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    if not digits:
        return None
    if digits.startswith("0"):
        digits = "60" + digits[1:]
    if not digits.startswith("60"):
        digits = "60" + digits
    return f"https://wa.me/{digits}"


# ============================================================================
# Staff
# ============================================================================

class Staff(StoreRecord):
    """A user with role 'staff'. Read-only here."""

    email: Text = None
    display_name: Text = None
    name: Text = None
    department: Text = None
    role: Text = None

    @property
    def label(self) -> str:
        """Name written onto assigned reports"""
        return self.display_name or self.name or self.email or self.id

    @property
    def department_label(self) -> str:
        return self.department or "N/A"


# ============================================================================
# Support Ticket
# ============================================================================

class TicketResponse(BaseModel):
    """One message in a ticket thread"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Text = None
    message: str = ""
    timestamp: Timestamp = None
    author: Text = None
    author_type: Text = AuthorType.ADMIN.value


def _as_responses(value: Any) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, (dict, TicketResponse))]


class SupportTicket(StoreRecord):
    """A student-submitted support ticket, optionally linked to a report"""

    report_id: Text = None
    report_category: Text = None
    user_email: Text = None
    issue_description: Text = None
    status: str = TicketStatus.OPEN.value
    responses: Annotated[List[TicketResponse], BeforeValidator(_as_responses)] = Field(default_factory=list)
    created_at: Timestamp = None
    updated_at: Timestamp = None
    last_response_at: Timestamp = None
    resolved_at: Timestamp = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> str:
        text = _as_text(v)
        return text if text else TicketStatus.OPEN.value


# ============================================================================
# Actor & filters
# ============================================================================

class ActorContext(BaseModel):
    """Authenticated administrator, from the identity provider's token"""
    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., description="Admin email")
    display_name: str = Field(..., description="Admin display name")
    roles: List[str] = Field(default_factory=list, description="Role claims")


class CustomDateRange(BaseModel):
    """Inclusive calendar date range for the custom filter"""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
