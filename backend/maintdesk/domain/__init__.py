"""Domain layer - records, enums and errors"""
from .enums import ReportStatus, TicketStatus, ReviewDecision, AuthorType, DateRangeMode, SortDirection
from .errors import (
    DomainError, NotFoundError, ReportNotFoundError, StaffNotFoundError,
    TicketNotFoundError, InvalidTransitionError, ValidationError, StoreError
)
from .models import Report, Staff, SupportTicket, TicketResponse, ActorContext, CustomDateRange

__all__ = [
    "ReportStatus", "TicketStatus", "ReviewDecision", "AuthorType", "DateRangeMode", "SortDirection",
    "DomainError", "NotFoundError", "ReportNotFoundError", "StaffNotFoundError",
    "TicketNotFoundError", "InvalidTransitionError", "ValidationError", "StoreError",
    "Report", "Staff", "SupportTicket", "TicketResponse", "ActorContext", "CustomDateRange",
]
