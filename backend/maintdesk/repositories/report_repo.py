"""Report Repository - Data access for maintenance reports"""
from typing import Any, Dict, List, Optional

from .record_store import RecordStore
from .store_factory import get_record_store
from ..config.settings import settings
from ..domain.enums import ReportStatus
from ..domain.errors import ReportNotFoundError
from ..domain.models import Report
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ReportRepository:
    """Repository for report documents"""
    
    def __init__(self, store: Optional[RecordStore] = None):
        self._store = store or get_record_store()
        self._collection = settings.reports_collection
    
    @property
    def collection(self) -> str:
        return self._collection
    
    def get_report(self, report_id: str) -> Optional[Report]:
        """Get report by ID"""
        doc = self._store.get_by_id(self._collection, report_id)
        return Report.model_validate(doc) if doc else None
    
    def get_report_or_raise(self, report_id: str) -> Report:
        """Get report by ID or raise error"""
        report = self.get_report(report_id)
        if not report:
            raise ReportNotFoundError(
                f"Report {report_id} not found",
                details={"report_id": report_id}
            )
        return report
    
    def list_reports(self, status: Optional[ReportStatus] = None) -> List[Report]:
        """List reports, optionally restricted to one status"""
        query = {"status": status.value} if status else None
        return [Report.model_validate(doc) for doc in self._store.list(self._collection, query)]
    
    def update_report(self, report_id: str, updates: Dict[str, Any]) -> Report:
        """Apply a single-document field update (last write wins)"""
        doc = self._store.update(self._collection, report_id, updates)
        if doc is None:
            raise ReportNotFoundError(
                f"Report {report_id} not found",
                details={"report_id": report_id}
            )
        logger.info(f"Updated report: {report_id}", extra={"report_id": report_id})
        return Report.model_validate(doc)
    