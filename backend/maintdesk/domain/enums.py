"""Domain Enumerations - Status and option values"""
from enum import Enum


class ReportStatus(str, Enum):
    """Maintenance report status, stored by display value"""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    PENDING_REVIEW = "Pending Review"  # Staff submitted a resolution, awaiting admin
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class TicketStatus(str, Enum):
    """Support ticket status"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class ReportCategory(str, Enum):
    """Known report categories (compared lowercase)"""
    DORM = "dorm"
    FACULTY = "faculty"
    CAMPUS = "campus"


class ReviewDecision(str, Enum):
    """Admin decision on a staff-submitted resolution"""
    APPROVE = "approve"
    REJECT = "reject"


class AuthorType(str, Enum):
    """Who wrote a ticket response"""
    ADMIN = "admin"
    STUDENT = "student"


class DateRangeMode(str, Enum):
    """Time window presets for report filters"""
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    LAST_WEEK = "lastWeek"
    MONTH = "month"
    LAST_MONTH = "lastMonth"
    YEAR = "year"
    ALL = "all"
    CUSTOM = "custom"


class SortDirection(str, Enum):
    """Table sort direction"""
    ASC = "asc"
    DESC = "desc"


class LifecycleAction(str, Enum):
    """Lifecycle operations, used as the structured log ``action`` field"""
    ASSIGN = "ASSIGN"
    REASSIGN = "REASSIGN"
    UPDATE_STATUS = "UPDATE_STATUS"
    RESOLVE = "RESOLVE"
    REVIEW = "REVIEW"
    ADD_RESPONSE = "ADD_RESPONSE"
