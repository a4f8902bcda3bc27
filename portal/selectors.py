"""Derived data shown by the portal pages: filters, sorting and aggregates."""
from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from .models import Announcement, Employee, PortalUser, RequestStatus, RequestType, TimeOffRequest

REQUEST_FILTERS = ("all", "pending", "approved", "denied")
DIRECTORY_SORT_FIELDS = ("name", "title", "department", "manager")
ASCENDING = "asc"
DESCENDING = "desc"
HOURS_PER_DAY = 8


def _visible_to(requests: Iterable[TimeOffRequest], user: PortalUser) -> list[TimeOffRequest]:
    if user.is_admin:
        return list(requests)
    return [request_obj for request_obj in requests if request_obj.employee_id == user.id]


def normalize_filter(value: Optional[str]) -> str:
    return value if value in REQUEST_FILTERS else "all"


def visible_requests(
    requests: Iterable[TimeOffRequest], user: PortalUser, status_filter: str = "all"
) -> list[TimeOffRequest]:
    """Requests the actor may see, narrowed to ``status_filter`` unless it is ``all``."""
    visible = _visible_to(requests, user)
    if status_filter == "all":
        return visible
    return [request_obj for request_obj in visible if request_obj.status == status_filter]


def pending_requests(requests: Iterable[TimeOffRequest], user: PortalUser) -> list[TimeOffRequest]:
    return visible_requests(requests, user, RequestStatus.PENDING)


def pto_days(user: PortalUser) -> Optional[int]:
    try:
        return math.floor(user.pto_balance / HOURS_PER_DAY)
    except (TypeError, ValueError):
        return None


def recent_announcements(announcements: Sequence[Announcement], limit: int = 3) -> list[Announcement]:
    # Storage order, not date order.
    return list(announcements[:limit])


def search_employees(employees: Iterable[Employee], term: str) -> list[Employee]:
    needle = (term or "").lower()
    return [
        employee
        for employee in employees
        if any(needle in str(value).lower() for value in employee.to_dict().values())
    ]


def sort_employees(employees: Iterable[Employee], field: str, direction: str = ASCENDING) -> list[Employee]:
    if field not in DIRECTORY_SORT_FIELDS:
        raise ValueError(f"Cannot sort the directory by {field!r}.")
    ordered = sorted(employees, key=lambda employee: getattr(employee, field))
    if direction == DESCENDING:
        ordered.reverse()
    return ordered


def next_sort_state(current_field: str, current_direction: str, clicked: str) -> tuple[str, str]:
    """Sort state after clicking the ``clicked`` column header."""
    if clicked == current_field:
        return clicked, DESCENDING if current_direction == ASCENDING else ASCENDING
    return clicked, ASCENDING


def _percentage(count: int, total: int) -> int:
    if not total:
        return 0
    # Half-up rounding, so 2.5% shows as 3%.
    return math.floor(count * 100 / total + 0.5)


def build_report(requests: Sequence[TimeOffRequest], recent_limit: int = 10) -> dict:
    """Aggregate figures over every stored request, regardless of employee."""
    total = len(requests)
    status_counts = {status: 0 for status in RequestStatus.values}
    type_counts = {request_type: 0 for request_type in RequestType.values}
    total_days = 0
    approved_days = 0

    for request_obj in requests:
        if request_obj.status in status_counts:
            status_counts[request_obj.status] += 1
        if request_obj.type in type_counts:
            type_counts[request_obj.type] += 1
        total_days += request_obj.days
        if request_obj.status == RequestStatus.APPROVED:
            approved_days += request_obj.days

    return {
        "total_requests": total,
        "status_counts": status_counts,
        "type_counts": type_counts,
        "status_breakdown": [
            (status, count, _percentage(count, total)) for status, count in status_counts.items()
        ],
        "type_breakdown": [
            (request_type, count, _percentage(count, total)) for request_type, count in type_counts.items()
        ],
        "total_days": total_days,
        "approved_days": approved_days,
        "recent_requests": list(reversed(requests))[:recent_limit],
    }
