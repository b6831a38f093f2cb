"""API Routes module"""
from fastapi import APIRouter

from .reports import router as reports_router
from .tickets import router as tickets_router
from .views import router as views_router
from .live import router as live_router

# Main API router
api_router = APIRouter()

api_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
api_router.include_router(tickets_router, prefix="/tickets", tags=["Support Tickets"])
api_router.include_router(views_router, tags=["Views"])
api_router.include_router(live_router, tags=["Live"])

__all__ = ["api_router"]
