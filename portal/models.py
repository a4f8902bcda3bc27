"""Record types for the HR portal.

Nothing here is backed by a relational table: records are plain dataclasses
that the record store serializes into blob storage. Choices still use
Django's ``TextChoices`` so forms and templates can share them.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, ClassVar, Optional, Union, get_args, get_origin, get_type_hints

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class Role(models.TextChoices):
    EMPLOYEE = "employee", "Employee"
    ADMIN = "admin", "HR Admin"


class RequestType(models.TextChoices):
    VACATION = "vacation", "Vacation"
    SICK = "sick", "Sick Leave"
    PERSONAL = "personal", "Personal Day"


class RequestStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    DENIED = "denied", "Denied"


class Priority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


def _storage_key(attribute: str) -> str:
    head, *rest = attribute.split("_")
    return head + "".join(part.title() for part in rest)


def _matches(value: Any, expected: Any) -> bool:
    if expected is Any:
        return True
    if get_origin(expected) is Union:
        return any(_matches(value, option) for option in get_args(expected))
    if expected is int:
        # bool is an int subclass but never a valid count.
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


class Record:
    """Mixin mapping dataclass attributes to the persisted camelCase layout."""

    optional_fields: ClassVar[frozenset] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None and item.name in self.optional_fields:
                continue
            data[_storage_key(item.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} record must be an object, got {type(data).__name__}")
        hints = get_type_hints(cls)
        kwargs = {}
        for item in fields(cls):
            key = _storage_key(item.name)
            if key in data:
                value = data[key]
                if not _matches(value, hints[item.name]):
                    raise TypeError(f"{cls.__name__}.{key} has unexpected type {type(value).__name__}")
                kwargs[item.name] = value
            elif item.name not in cls.optional_fields:
                raise KeyError(key)
        return cls(**kwargs)


@dataclass
class PortalUser(Record):
    """The identity of whoever is logged in for this browser profile."""

    id: str
    name: str
    email: str
    role: str
    department: str
    title: str
    manager: str
    pto_balance: Any

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def merged(self, **changes: Any) -> "PortalUser":
        # dataclasses.replace rejects unknown field names with TypeError.
        return replace(self, **changes)


@dataclass
class TimeOffRequest(Record):
    """A leave request lifecycle record."""

    optional_fields: ClassVar[frozenset] = frozenset({"reviewed_by", "reviewed_date"})

    id: str
    employee_id: str
    employee_name: str
    type: str
    start_date: str
    end_date: str
    days: int
    reason: str
    status: str
    submitted_date: str
    reviewed_by: Optional[str] = None
    reviewed_date: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.employee_name} {self.start_date}->{self.end_date} ({self.type})"

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def get_type_display(self) -> str:
        return _label(RequestType, self.type)

    def get_status_display(self) -> str:
        return _label(RequestStatus, self.status)

    def record_decision(self, reviewer: PortalUser, decision: str) -> "TimeOffRequest":
        """Return the request approved or denied by ``reviewer`` as of today."""
        if decision not in (RequestStatus.APPROVED, RequestStatus.DENIED):
            raise ValidationError("Invalid decision.")
        if not self.is_pending:
            raise ValidationError("This request has already been reviewed.")
        return replace(
            self,
            status=str(decision),
            reviewed_by=reviewer.name,
            reviewed_date=today_iso(),
        )


@dataclass
class Announcement(Record):
    """A notice posted by HR to every employee."""

    id: str
    title: str
    content: str
    author: str
    date: str
    priority: str

    def __str__(self) -> str:
        return self.title

    def get_priority_display(self) -> str:
        return _label(Priority, self.priority)


@dataclass
class Employee(Record):
    """A read-only staff directory entry."""

    id: str
    name: str
    email: str
    department: str
    title: str
    manager: str
    phone: str
    hire_date: str

    def __str__(self) -> str:
        return self.name


def _label(choices: type[models.TextChoices], value: str) -> str:
    try:
        return choices(value).label
    except ValueError:
        return str(value)


def today_iso() -> str:
    return timezone.localdate().isoformat()


def compute_days(start: date, end: date) -> int:
    """Inclusive day count; zero or negative when ``end`` precedes ``start``."""
    return (end - start).days + 1


_id_lock = threading.Lock()
_last_id = 0


def new_record_id() -> str:
    """Millisecond timestamp id, bumped so one process never repeats itself."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
    return str(candidate)
