"""Blob storage backends holding the portal's serialized collections.

A backend stores opaque strings under string keys, the way a browser's local
storage does. Which backend is used is configured through
``settings.PORTAL_STORAGE``; the default keeps the blobs in the visitor's
Django session so every browser profile owns an independent copy.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string


class StorageError(Exception):
    """Base class for failures of the portal's local storage."""


class StorageUnavailableError(StorageError):
    """The backend could not be read from or written to."""


class CorruptedStorageError(StorageError):
    """A persisted blob could not be deserialized into typed records."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Stored data under {key!r} is corrupted: {reason}")


class ReadOnlyCollectionError(StorageError):
    """A write was attempted against a collection that only supports reads."""


class BlobStorage:
    """Interface every storage backend implements."""

    @classmethod
    def from_request(cls, request, **options) -> "BlobStorage":
        return cls(**options)

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryBlobStorage(BlobStorage):
    """Process-local storage, mostly useful in tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SessionBlobStorage(BlobStorage):
    """Keeps blobs inside the Django session of the current browser."""

    def __init__(self, session) -> None:
        self.session = session

    @classmethod
    def from_request(cls, request, **options) -> "SessionBlobStorage":
        return cls(request.session)

    def get(self, key: str) -> Optional[str]:
        value = self.session.get(key)
        if value is not None and not isinstance(value, str):
            raise StorageUnavailableError(f"Session entry {key!r} is not a string blob.")
        return value

    def set(self, key: str, value: str) -> None:
        self.session[key] = value

    def remove(self, key: str) -> None:
        self.session.pop(key, None)


class FileBlobStorage(BlobStorage):
    """One JSON file per key inside ``directory``; a single shared profile."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"Could not read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            handle = tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.directory, prefix=f".{key}-", delete=False
            )
        except OSError as exc:
            raise StorageUnavailableError(f"Could not write {path}: {exc}") from exc
        try:
            with handle:
                handle.write(value)
            os.replace(handle.name, path)
        except OSError as exc:
            Path(handle.name).unlink(missing_ok=True)
            raise StorageUnavailableError(f"Could not write {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageUnavailableError(f"Could not remove {path}: {exc}") from exc


def get_storage(request) -> BlobStorage:
    """Instantiate the configured backend for ``request``."""
    config = getattr(settings, "PORTAL_STORAGE", {})
    backend_path = config.get("BACKEND", "portal.storage.SessionBlobStorage")
    try:
        backend = import_string(backend_path)
    except ImportError as exc:
        raise ImproperlyConfigured(f"Unknown PORTAL_STORAGE backend {backend_path!r}.") from exc
    try:
        return backend.from_request(request, **config.get("OPTIONS", {}))
    except TypeError as exc:
        raise ImproperlyConfigured(f"Invalid PORTAL_STORAGE options for {backend_path}: {exc}") from exc
