"""Service modules - View aggregation and page projections"""
from .view_service import ViewService
from .live_view import LiveProjection, create_live_view, LIVE_VIEWS

__all__ = [
    "ViewService",
    "LiveProjection",
    "create_live_view",
    "LIVE_VIEWS",
]
