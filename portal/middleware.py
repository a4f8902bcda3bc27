"""Request wiring for the portal: context injection and storage failure reporting."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib import messages
from django.shortcuts import render

from .session import SessionContext
from .storage import BlobStorage, StorageError, get_storage
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class PortalContext:
    """Everything a view needs: the record store and the session identity."""

    storage: BlobStorage
    store: RecordStore
    session: SessionContext

    @classmethod
    def for_storage(cls, storage: BlobStorage) -> "PortalContext":
        return cls(storage=storage, store=RecordStore(storage), session=SessionContext(storage))


class PortalContextMiddleware:
    """Attach a fresh :class:`PortalContext` to every request as ``request.portal``."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.portal = PortalContext.for_storage(get_storage(request))
        return self.get_response(request)


class StorageErrorMiddleware:
    """Turn storage failures raised by a view into an error page and notice."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, StorageError):
            return None
        logger.error("Storage failure on %s %s", request.method, request.path, exc_info=exception)
        # The broken context must not be touched again while rendering the error page.
        request.portal = None
        messages.error(request, f"Your local portal data could not be used: {exception}")
        return render(request, "portal/storage_error.html", status=503)
