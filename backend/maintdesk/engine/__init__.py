"""Lifecycle Engine - report and ticket state transitions"""
from .report_lifecycle import ReportLifecycle
from .ticket_lifecycle import TicketLifecycle
from . import transition_rules

__all__ = [
    "ReportLifecycle",
    "TicketLifecycle",
    "transition_rules",
]
