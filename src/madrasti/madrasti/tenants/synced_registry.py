from __future__ import annotations

import json
import logging
import threading
from typing import List, Optional, Sequence

from ..core.constants import REGISTRY_LOCAL_KEY, REGISTRY_REMOTE_KEY
from ..core.exceptions import RemoteStoreError, StorageError, ValidationError
from ..storage.local_cache import LocalCache
from ..storage.remote_store import RemoteStore
from .model import SchoolMetadata
from .repository import TenantRegistry

logger = logging.getLogger(__name__)


class SyncedTenantRegistry(TenantRegistry):
    """School registry kept in the local cache and mirrored to a system document.

    Registry edits are rare, so they are written to the remote store right away
    instead of going through a debounce window.
    """

    def __init__(self, local: LocalCache, remote: Optional[RemoteStore] = None, *, cloud_enabled: bool = False):
        self._local = local
        self._remote = remote if cloud_enabled else None
        self._lock = threading.RLock()
        self._schools: List[SchoolMetadata] = self._read_local()

    def _read_local(self) -> List[SchoolMetadata]:
        try:
            raw = self._local.get_item(REGISTRY_LOCAL_KEY)
            return [SchoolMetadata.from_dict(d) for d in json.loads(raw)] if raw else []
        except (StorageError, ValueError, KeyError, TypeError):
            logger.exception("Cannot read the local school registry; starting empty")
            return []

    def refresh_from_remote(self) -> bool:
        """Replace the local list with the remote copy if one exists."""

        if self._remote is None:
            return False
        try:
            raw = self._remote.load_system_data(REGISTRY_REMOTE_KEY)
            if raw is None:
                return False
            schools = [SchoolMetadata.from_dict(d) for d in raw]
        except (RemoteStoreError, ValueError, KeyError, TypeError):
            logger.exception("Cannot load the remote school registry; keeping the local list")
            return False
        with self._lock:
            self._schools = schools
            self._persist_local()
        return True

    def _persist(self) -> None:
        self._persist_local()
        if self._remote is None:
            return
        try:
            self._remote.save_system_data(REGISTRY_REMOTE_KEY, [s.to_dict() for s in self._schools])
        except RemoteStoreError:
            logger.exception("Cannot save the remote school registry")

    def _persist_local(self) -> None:
        try:
            self._local.set_item(REGISTRY_LOCAL_KEY, json.dumps([s.to_dict() for s in self._schools], ensure_ascii=False))
        except StorageError:
            logger.exception("Cannot save the local school registry")

    def list(self) -> Sequence[SchoolMetadata]:
        with self._lock:
            return list(self._schools)

    def get(self, school_id: str) -> Optional[SchoolMetadata]:
        with self._lock:
            return next((s for s in self._schools if s.id == school_id), None)

    def add(self, school: SchoolMetadata) -> None:
        with self._lock:
            if any(s.id == school.id for s in self._schools):
                raise ValidationError("كود المدرسة مستخدم مسبقاً")
            self._schools.append(school)
            self._persist()

    def update(self, school: SchoolMetadata) -> bool:
        with self._lock:
            for i, s in enumerate(self._schools):
                if s.id == school.id:
                    self._schools[i] = school
                    self._persist()
                    return True
            return False

    def remove(self, school_id: str) -> bool:
        with self._lock:
            kept = [s for s in self._schools if s.id != school_id]
            if len(kept) == len(self._schools):
                return False
            self._schools = kept
            self._persist()
            return True
