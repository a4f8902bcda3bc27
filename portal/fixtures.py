# Canned data written into an empty storage the first time a collection is read.
from __future__ import annotations


DEFAULT_REQUESTS = [
    {
        "id": "1",
        "employeeId": "emp-1",
        "employeeName": "John Martinez",
        "type": "vacation",
        "startDate": "2025-11-15",
        "endDate": "2025-11-19",
        "days": 5,
        "reason": "Family vacation",
        "status": "pending",
        "submittedDate": "2025-10-01",
    },
    {
        "id": "2",
        "employeeId": "emp-1",
        "employeeName": "John Martinez",
        "type": "sick",
        "startDate": "2025-09-12",
        "endDate": "2025-09-12",
        "days": 1,
        "reason": "Medical appointment",
        "status": "approved",
        "submittedDate": "2025-09-10",
        "reviewedBy": "HR Admin",
        "reviewedDate": "2025-09-11",
    },
]

DEFAULT_ANNOUNCEMENTS = [
    {
        "id": "1",
        "title": "Holiday Schedule 2025",
        "content": (
            "Please review the updated holiday schedule for the remainder of 2025. "
            "Thanksgiving: Nov 27-28, Christmas: Dec 25-26, New Year: Jan 1."
        ),
        "author": "HR Admin",
        "date": "2025-10-01",
        "priority": "high",
    },
    {
        "id": "2",
        "title": "Open Enrollment Period",
        "content": (
            "Open enrollment for health benefits begins November 1st and ends November 30th. "
            "Please review your benefits and make any necessary changes."
        ),
        "author": "HR Admin",
        "date": "2025-09-28",
        "priority": "high",
    },
    {
        "id": "3",
        "title": "Employee Wellness Program",
        "content": (
            "Join our new wellness program! Free fitness classes available every Tuesday "
            "and Thursday at 5 PM in Conference Room A."
        ),
        "author": "HR Admin",
        "date": "2025-09-20",
        "priority": "medium",
    },
]

DEFAULT_EMPLOYEES = [
    ("emp-1", "John Martinez", "john.martinez@lacounty.gov", "Public Works",
     "Senior Engineer", "Sarah Chen", "(213) 555-0123", "2018-03-15"),
    ("emp-2", "Sarah Chen", "sarah.chen@lacounty.gov", "Public Works",
     "Engineering Manager", "Robert Kim", "(213) 555-0124", "2015-06-01"),
    ("emp-3", "Michael Johnson", "michael.johnson@lacounty.gov", "Finance",
     "Budget Analyst", "Lisa Wong", "(213) 555-0125", "2019-09-10"),
    ("emp-4", "Emily Rodriguez", "emily.rodriguez@lacounty.gov", "IT Services",
     "Systems Administrator", "David Lee", "(213) 555-0126", "2020-01-20"),
    ("emp-5", "David Lee", "david.lee@lacounty.gov", "IT Services",
     "IT Director", "Chief Information Officer", "(213) 555-0127", "2012-04-15"),
]


def employee_rows() -> list[dict]:
    keys = ("id", "name", "email", "department", "title", "manager", "phone", "hireDate")
    return [dict(zip(keys, row)) for row in DEFAULT_EMPLOYEES]


CANNED_USERS = {
    "admin": {
        "id": "admin-1",
        "name": "HR Admin",
        "email": "admin@lacounty.gov",
        "role": "admin",
        "department": "Human Resources",
        "title": "HR Director",
        "manager": "Chief Executive Officer",
        "ptoBalance": 0,
    },
    "employee": {
        "id": "emp-1",
        "name": "John Martinez",
        "email": "john.martinez@lacounty.gov",
        "role": "employee",
        "department": "Public Works",
        "title": "Senior Engineer",
        "manager": "Sarah Chen",
        "ptoBalance": 120,
    },
}

UPCOMING_HOLIDAYS = [
    ("Nov 27-28", "Thanksgiving"),
    ("Dec 25-26", "Christmas"),
    ("Jan 1", "New Year"),
]
