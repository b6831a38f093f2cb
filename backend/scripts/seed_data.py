"""
Seed Data Script - Creates sample staff, reports and support tickets
Run: python -m scripts.seed_data
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import timedelta
from maintdesk.config.settings import settings
from maintdesk.repositories.record_store import RecordStore
from maintdesk.repositories.store_factory import create_record_store
from maintdesk.utils.time import utc_now


STAFF = [
    {"id": "staff-electrical", "email": "aiman@uni.edu.my", "displayName": "Aiman Hakim",
     "department": "Electrical", "role": "staff"},
    {"id": "staff-plumbing", "email": "mei.ling@uni.edu.my", "name": "Tan Mei Ling",
     "department": "Plumbing", "role": "staff"},
    {"id": "staff-general", "email": "ravi@uni.edu.my", "role": "staff"},
    {"id": "student-1", "email": "student1@siswa.uni.edu.my", "name": "Student One", "role": "student"},
]


def sample_reports():
    """Reports spread over the last few weeks, in every lifecycle state"""
    now = utc_now()
    return [
        {"id": "RPT-1001", "category": "dorm", "type": "Electrical", "college": "KK12", "block": "A",
         "floor": "2", "house": "4", "room": "12", "status": "Pending", "timestamp": now - timedelta(hours=3),
         "userEmail": "student1@siswa.uni.edu.my", "reporterFullPhone": "012-345 6789",
         "description": "Ceiling fan not working"},
        {"id": "RPT-1002", "category": "Faculty", "type": "Plumbing", "faculty": "Engineering", "floor": "1",
         "room": "Lab 3", "status": "In Progress", "assignedTo": "mei.ling@uni.edu.my",
         "assignedStaffName": "Tan Mei Ling", "assignedStaffDepartment": "Plumbing",
         "assignedAt": now - timedelta(days=2), "timestamp": now - timedelta(days=3)},
        {"id": "RPT-1003", "category": "dorm", "type": "Electrical", "college": "KK5", "block": "C",
         "status": "Pending Review", "assignedTo": "aiman@uni.edu.my", "assignedStaffName": "Aiman Hakim",
         "assignedStaffDepartment": "Electrical", "resolutionImage": "https://example.org/fixed.jpg",
         "resolutionNote": "Replaced the breaker", "resolutionTimestamp": now - timedelta(hours=20),
         "pendingReview": True, "timestamp": now - timedelta(days=9)},
        {"id": "RPT-1004", "category": "campus", "type": "Landscaping",
         "location": {"latitude": 3.1209, "longitude": 101.6538}, "status": "Resolved",
         "resolvedAt": now - timedelta(days=10), "timestamp": now - timedelta(days=20)},
        {"id": "RPT-1005", "category": "Dorm", "type": "Furniture", "college": "KK12", "status": "Rejected",
         "reviewNote": "Photo does not show the repaired chair", "reviewedBy": "admin",
         "timestamp": now - timedelta(days=35)},
    ]


def sample_tickets():
    now = utc_now()
    return [
        {"id": "TKT-2001", "reportId": "RPT-1001", "reportCategory": "dorm",
         "userEmail": "student1@siswa.uni.edu.my", "issueDescription": "No update on my fan report",
         "status": "Open", "responses": [], "createdAt": now - timedelta(hours=1)},
        {"id": "TKT-2002", "reportId": "RPT-1002", "reportCategory": "faculty",
         "userEmail": "student1@siswa.uni.edu.my", "issueDescription": "Lab sink still leaking",
         "status": "In Progress", "createdAt": now - timedelta(days=1),
         "responses": [{"id": "RSP-seed", "message": "A plumber is on the way", "timestamp": now,
                        "author": "Admin", "authorType": "admin"}]},
    ]


def seed(store: RecordStore) -> None:
    """Insert the sample data unless reports already exist"""
    if store.list(settings.reports_collection):
        print("Store already has reports. Skipping seed.")
        return
    for doc in STAFF:
        store.insert(settings.users_collection, doc)
    for doc in sample_reports():
        store.insert(settings.reports_collection, doc)
    for doc in sample_tickets():
        store.insert(settings.tickets_collection, doc)
    print(f"Seeded {len(STAFF)} users, {len(sample_reports())} reports, {len(sample_tickets())} tickets")


if __name__ == "__main__":
    store = create_record_store()
    try:
        seed(store)
    finally:
        store.close()
