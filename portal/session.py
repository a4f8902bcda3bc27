"""Identity of the logged-in actor for one browser profile."""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .fixtures import CANNED_USERS
from .models import PortalUser
from .storage import BlobStorage, CorruptedStorageError

logger = logging.getLogger(__name__)

USER_KEY = "hr_portal_user"

_UNLOADED = object()


class SessionContext:
    """Holds the current :class:`PortalUser` and writes it through to storage.

    The identity is read lazily from ``storage`` on first access. Every
    mutation persists the complete snapshot straight away; ``logout`` removes
    the stored key entirely.
    """

    def __init__(self, storage: BlobStorage) -> None:
        self.storage = storage
        self._current: Any = _UNLOADED

    @property
    def current(self) -> Optional[PortalUser]:
        if self._current is _UNLOADED:
            self._current = self._load()
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    def login(self, role: str) -> PortalUser:
        try:
            identity = CANNED_USERS[str(role)]
        except KeyError:
            raise ValueError(f"Unknown role {role!r}.") from None
        user = PortalUser.from_dict(identity)
        self._store(user)
        logger.info("Logged in as %s (%s)", user.id, user.role)
        return user

    def logout(self) -> None:
        # Never loads the stored identity, so a corrupted one can still be cleared.
        user = self._current if isinstance(self._current, PortalUser) else None
        self._current = None
        self.storage.remove(USER_KEY)
        if user is not None:
            logger.info("Logged out %s", user.id)
        else:
            logger.info("Cleared stored identity")

    def update_user(self, **changes: Any) -> Optional[PortalUser]:
        """Shallow-merge ``changes`` into the current user; no-op when logged out."""
        if self.current is None:
            return None
        user = self.current.merged(**changes)
        self._store(user)
        logger.info("Updated profile of %s: %s", user.id, ", ".join(sorted(changes)))
        return user

    def _store(self, user: PortalUser) -> None:
        self._current = user
        self.storage.set(USER_KEY, json.dumps(user.to_dict()))

    def _load(self) -> Optional[PortalUser]:
        raw = self.storage.get(USER_KEY)
        if raw is None:
            return None
        try:
            return PortalUser.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise CorruptedStorageError(USER_KEY, f"invalid identity ({exc})") from exc
