"""
Pytest Configuration and Fixtures

Shared fixtures: an in-memory record store seeded with staff, reports and
tickets, a frozen clock, and admin tokens for the HTTP tests.
"""

import os

# Settings are read on first import
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("ADMIN_EMAILS", "admin@uni.edu.my")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("TIMEZONE", "Asia/Kuala_Lumpur")

from datetime import datetime, timedelta, timezone
from typing import Generator

import jwt
import pytest
from dateutil import tz

from maintdesk.config.settings import settings
from maintdesk.domain.errors import StoreError
from maintdesk.domain.models import ActorContext
from maintdesk.repositories.memory_store import InMemoryRecordStore
from maintdesk.repositories.store_factory import set_record_store

KL = tz.gettz("Asia/Kuala_Lumpur")

# Saturday noon, local time
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=KL)
NOW_UTC = NOW.astimezone(timezone.utc)


def make_report(report_id: str, **fields) -> dict:
    doc = {"id": report_id, "category": "dorm", "type": "Electrical", "status": "Pending", "timestamp": NOW_UTC}
    doc.update(fields)
    return doc


def make_ticket(ticket_id: str, **fields) -> dict:
    doc = {
        "id": ticket_id,
        "reportId": "RPT-1",
        "reportCategory": "dorm",
        "userEmail": "student@siswa.uni.edu.my",
        "issueDescription": "Fan still broken",
        "status": "Open",
        "responses": [],
        "createdAt": NOW_UTC,
    }
    doc.update(fields)
    return doc


STAFF_DOCS = [
    {"id": "staff-1", "email": "aiman@uni.edu.my", "displayName": "Aiman Hakim",
     "department": "Electrical", "role": "staff"},
    {"id": "staff-2", "email": "meiling@uni.edu.my", "name": "Tan Mei Ling", "role": "staff"},
    {"id": "staff-3", "email": "ravi@uni.edu.my", "role": "staff"},
    {"id": "student-1", "email": "student@siswa.uni.edu.my", "name": "A Student", "role": "student"},
]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    """Frozen lifecycle clock"""
    return lambda: NOW_UTC


def seed_collections() -> dict:
    return {
        settings.users_collection: STAFF_DOCS,
        settings.reports_collection: [
            make_report("RPT-PENDING"),
            make_report(
                "RPT-PROGRESS",
                status="In Progress",
                assignedTo="aiman@uni.edu.my",
                assignedStaffName="Aiman Hakim",
                assignedStaffDepartment="Electrical",
            ),
            make_report(
                "RPT-REVIEW",
                status="Pending Review",
                assignedTo="aiman@uni.edu.my",
                resolutionImage="https://example.org/fixed.jpg",
                resolutionNote="Replaced the breaker",
                resolutionTimestamp=NOW_UTC - timedelta(hours=2),
                pendingReview=True,
            ),
            make_report("RPT-RESOLVED", status="Resolved", assignedTo="meiling@uni.edu.my"),
            make_report("RPT-REJECTED", status="Rejected", assignedTo="ravi@uni.edu.my"),
        ],
        settings.tickets_collection: [
            make_ticket("TKT-OPEN"),
            make_ticket("TKT-RESOLVED", status="Resolved"),
        ],
    }


class FailingWritesStore(InMemoryRecordStore):
    """Reads work, every write fails the way a dropped connection would"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.write_attempts = 0

    def update(self, collection, doc_id, fields):
        self.write_attempts += 1
        raise StoreError(f"Failed to update {collection}/{doc_id}", details={"reason": "connection reset"})

    def append(self, collection, doc_id, array_field, item, fields=None):
        self.write_attempts += 1
        raise StoreError(f"Failed to update {collection}/{doc_id}", details={"reason": "connection reset"})


@pytest.fixture
def store() -> Generator[InMemoryRecordStore, None, None]:
    """Seeded in-memory store, installed as the process-wide store"""
    memory = InMemoryRecordStore(seed_collections())
    set_record_store(memory)
    yield memory
    memory.close()
    set_record_store(None)


@pytest.fixture
def failing_store() -> Generator[FailingWritesStore, None, None]:
    """Seeded store whose writes raise StoreError, installed process-wide"""
    memory = FailingWritesStore(seed_collections())
    set_record_store(memory)
    yield memory
    memory.close()
    set_record_store(None)


@pytest.fixture
def actor() -> ActorContext:
    return ActorContext(email="admin@uni.edu.my", display_name="Admin", roles=[])


def mint_token(email: str = "admin@uni.edu.my", expires_in: int = 3600, **claims) -> str:
    payload = {
        "email": email,
        "name": email.split("@")[0],
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {mint_token()}"}
