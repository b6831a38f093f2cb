"""Staff Repository - Read-only access to staff users"""
from typing import List, Optional

from .record_store import RecordStore
from .store_factory import get_record_store
from ..config.settings import settings
from ..domain.errors import StaffNotFoundError
from ..domain.models import Staff


class StaffRepository:
    """Users whose role is staff. Owned by user management, never written here."""
    
    def __init__(self, store: Optional[RecordStore] = None):
        self._store = store or get_record_store()
        self._collection = settings.users_collection
        self._role = settings.staff_role
    
    def list_staff(self) -> List[Staff]:
        """All staff members"""
        docs = self._store.list(self._collection, {"role": self._role})
        return [Staff.model_validate(doc) for doc in docs]
    
    def get_staff_or_raise(self, staff_id: str) -> Staff:
        """Get a staff member by user ID; non-staff users count as absent"""
        doc = self._store.get_by_id(self._collection, staff_id)
        if not doc or doc.get("role") != self._role:
            raise StaffNotFoundError(
                f"Staff member {staff_id} not found",
                details={"staff_id": staff_id}
            )
        return Staff.model_validate(doc)
