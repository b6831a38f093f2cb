"""API module - Routes and dependencies"""
from .deps import get_current_admin_dep, get_correlation_id_dep, get_store_dep

__all__ = ["get_current_admin_dep", "get_correlation_id_dep", "get_store_dep"]
