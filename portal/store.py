"""The record store: typed CRUD over the portal's three collections.

Each collection is one blob holding a versioned JSON envelope
``{"version": 1, "records": [...]}``. Every write rewrites the whole
collection; concurrent writers are not detected and the last write wins.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from . import fixtures
from .models import Announcement, Employee, Record, TimeOffRequest
from .storage import BlobStorage, CorruptedStorageError, ReadOnlyCollectionError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

REQUESTS = "requests"
ANNOUNCEMENTS = "announcements"
EMPLOYEES = "employees"

RecordT = TypeVar("RecordT", bound=Record)


@dataclass(frozen=True)
class Collection:
    key: str
    record_type: type
    seed: Callable[[], list[dict]]
    writable: bool = True


COLLECTIONS = {
    REQUESTS: Collection("hr_requests", TimeOffRequest, lambda: fixtures.DEFAULT_REQUESTS),
    ANNOUNCEMENTS: Collection("hr_announcements", Announcement, lambda: fixtures.DEFAULT_ANNOUNCEMENTS),
    EMPLOYEES: Collection("hr_employees", Employee, fixtures.employee_rows, writable=False),
}


class RecordStore:
    """Read-modify-write access to every collection held by ``storage``."""

    def __init__(self, storage: BlobStorage) -> None:
        self.storage = storage
        self.requests: Repository[TimeOffRequest] = Repository(self, REQUESTS)
        self.announcements: Repository[Announcement] = Repository(self, ANNOUNCEMENTS)
        self.employees: Repository[Employee] = Repository(self, EMPLOYEES)

    def get_all(self, name: str) -> list:
        collection = _collection(name)
        raw = self.storage.get(collection.key)
        if raw is None:
            rows = collection.seed()
            logger.info("Seeding %s with %d fixture record(s)", name, len(rows))
            self.storage.set(collection.key, _encode(rows))
            return [collection.record_type.from_dict(row) for row in rows]
        return _decode(collection, raw)

    def save(self, name: str, record: Record) -> None:
        collection = _writable(name)
        records = self.get_all(name)
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                break
        else:
            records.append(record)
        self._write(collection, records)

    def delete(self, name: str, record_id: str) -> None:
        collection = _writable(name)
        records = self.get_all(name)
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            return
        self._write(collection, remaining)

    def _write(self, collection: Collection, records: list) -> None:
        self.storage.set(collection.key, _encode([record.to_dict() for record in records]))


class Repository(Generic[RecordT]):
    """Typed view over one collection of a :class:`RecordStore`."""

    def __init__(self, store: RecordStore, name: str) -> None:
        self.store = store
        self.name = name

    def all(self) -> list[RecordT]:
        return self.store.get_all(self.name)

    def get(self, record_id: str) -> Optional[RecordT]:
        for record in self.all():
            if record.id == record_id:
                return record
        return None

    def save(self, record: RecordT) -> None:
        self.store.save(self.name, record)

    def delete(self, record_id: str) -> None:
        self.store.delete(self.name, record_id)


def _collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown collection {name!r}.") from None


def _writable(name: str) -> Collection:
    collection = _collection(name)
    if not collection.writable:
        raise ReadOnlyCollectionError(f"The {name} collection is read-only.")
    return collection


def _encode(rows: list[dict]) -> str:
    return json.dumps({"version": SCHEMA_VERSION, "records": rows})


def _decode(collection: Collection, raw: str) -> list:
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise CorruptedStorageError(collection.key, "malformed JSON") from exc

    if isinstance(payload, list):
        # Unversioned layout; rewritten as an envelope on the next save.
        rows = payload
    elif isinstance(payload, dict) and payload.get("version") == SCHEMA_VERSION:
        rows = payload.get("records")
        if not isinstance(rows, list):
            raise CorruptedStorageError(collection.key, "records must be a list")
    else:
        raise CorruptedStorageError(collection.key, "unsupported layout or schema version")

    try:
        return [collection.record_type.from_dict(row) for row in rows]
    except (KeyError, TypeError) as exc:
        raise CorruptedStorageError(collection.key, f"invalid record ({exc})") from exc
