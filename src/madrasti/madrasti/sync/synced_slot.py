"""Local-first state slot mirrored to the remote document store.

A slot is one named value (``students_v1``, ``plans_v1``, ...) of one school.
Reads are served from memory, seeded from the local cache. The remote copy is
fetched once in the background and wins if it exists. Every later change is
written to the local cache right away and to the remote store after a debounce
window, so a burst of edits produces one remote write carrying the last value.

There is no version field: two writers on the same slot overwrite each other
(last debounced write to land wins).
"""
from __future__ import annotations

import copy
import json
import logging
import threading
from typing import Any, Callable, Generic, List, Optional, TypeVar

from ..core.constants import DEFAULT_DEBOUNCE_SECONDS
from ..core.enums import SlotWriteStatus
from ..core.exceptions import StorageError, ValidationError
from ..storage.local_cache import LocalCache, slot_cache_key
from ..storage.remote_store import RemoteStore
from .scheduler import Cancellable, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncedSlot(Generic[T]):
    def __init__(
        self,
        school_id: str,
        slot_key: str,
        default: T,
        *,
        local: LocalCache,
        remote: Optional[RemoteStore] = None,
        cloud_enabled: bool = False,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        if not school_id or not str(school_id).strip():
            raise ValidationError("School id is required")
        if not slot_key:
            raise ValidationError("Slot key is required")

        self.school_id = str(school_id)
        self.slot_key = slot_key
        self.cache_key = slot_cache_key(self.school_id, slot_key)

        self._local = local
        self._remote = remote
        self._cloud_enabled = bool(cloud_enabled)
        self._scheduler = scheduler or ThreadingScheduler()
        self._debounce = float(debounce_seconds)

        self._lock = threading.RLock()
        self._loaded_event = threading.Event()
        self._default = copy.deepcopy(default)
        self._value: Any = self._read_local()

        self._started = False
        self._closed = False
        self._dirty = False
        self._listeners: List[Callable[[T], None]] = []

        self._pending: Optional[Cancellable] = None
        self._pending_value: Any = None
        self._generation = 0

        self.last_remote_error: Optional[BaseException] = None
        self.last_local_error: Optional[BaseException] = None

        if not self.sync_enabled:
            self._loaded_event.set()

    # -- state -----------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._loaded_event.is_set()

    @property
    def sync_enabled(self) -> bool:
        return self._cloud_enabled and self._remote is not None

    @property
    def has_pending_write(self) -> bool:
        with self._lock:
            return self._pending is not None

    def get(self) -> T:
        with self._lock:
            return copy.deepcopy(self._value)

    def wait_loaded(self, timeout: Optional[float] = None) -> bool:
        return self._loaded_event.wait(timeout)

    def on_remote_updated(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            self._listeners.append(callback)

    # -- initial fetch ---------------------------------------------------

    def start(self) -> None:
        """Fetch the remote copy once. Later calls are no-ops."""

        with self._lock:
            if self._started:
                return
            self._started = True

        if not self.sync_enabled:
            self._finish_loading(None)
            return

        self._scheduler.submit(self._fetch_remote)

    def _fetch_remote(self) -> None:
        remote_value = None
        try:
            remote_value = self._remote.load_school_data(self.school_id, self.slot_key)
        except Exception as e:
            logger.exception("Remote fetch failed for %s; keeping local value", self.cache_key)
            self.last_remote_error = e
        self._finish_loading(remote_value)

    def _finish_loading(self, remote_value: Any) -> None:
        listeners: List[Callable[[T], None]] = []
        with self._lock:
            if self._closed:
                logger.debug("Discarding remote fetch for closed slot %s", self.cache_key)
                return

            if remote_value is not None:
                self._value = remote_value
                self._dirty = False
                try:
                    self._write_local(json.dumps(remote_value, ensure_ascii=False))
                except (TypeError, ValueError, StorageError):
                    logger.exception("Cannot cache remote value for %s", self.cache_key)
                listeners = list(self._listeners)

            self._loaded_event.set()

            if self._dirty:
                # Edits made while loading, and the remote had nothing to offer.
                self._dirty = False
                self._persist_locked()

            value = copy.deepcopy(self._value)

        for callback in listeners:
            try:
                callback(value)
            except Exception:
                logger.exception("Remote update listener failed for %s", self.cache_key)

    # -- writes ----------------------------------------------------------

    def set(self, value: T) -> SlotWriteStatus:
        with self._lock:
            self._value = value
            if not self.is_loaded:
                self._dirty = True
                return SlotWriteStatus.SKIPPED_NOT_LOADED
            return self._persist_locked()

    def update(self, fn: Callable[[T], T]) -> SlotWriteStatus:
        """Read-modify-write under the slot lock."""

        with self._lock:
            return self.set(fn(copy.deepcopy(self._value)))

    def _persist_locked(self) -> SlotWriteStatus:
        try:
            serialized = json.dumps(self._value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.exception("Cannot serialize %s", self.cache_key)
            self.last_local_error = e
            return SlotWriteStatus.LOCAL_FAILED

        status = SlotWriteStatus.SAVED
        try:
            self._write_local(serialized)
        except StorageError as e:
            logger.exception("Local cache write failed for %s", self.cache_key)
            self.last_local_error = e
            status = SlotWriteStatus.LOCAL_FAILED

        if self.sync_enabled:
            self._schedule_remote_write(json.loads(serialized))
        return status

    def _schedule_remote_write(self, snapshot: Any) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._generation += 1
        generation = self._generation
        self._pending_value = snapshot
        self._pending = self._scheduler.call_later(self._debounce, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                return
            value = self._pending_value
            self._pending = None
            self._pending_value = None
        self._send(value)

    def _send(self, value: Any) -> None:
        try:
            self._remote.save_school_data(self.school_id, self.slot_key, value)
            self.last_remote_error = None
        except Exception as e:
            # No retry: the next local change schedules another write.
            logger.exception("Remote write failed for %s", self.cache_key)
            self.last_remote_error = e

    def flush(self) -> bool:
        """Send a pending debounced write now. Returns False if none was pending."""

        with self._lock:
            if self._pending is None:
                return False
            self._pending.cancel()
            self._generation += 1
            value = self._pending_value
            self._pending = None
            self._pending_value = None
        self._send(value)
        return True

    def close(self) -> None:
        """Detach the consumer.

        A fetch still in flight is discarded when it resolves. A pending
        debounced write is left to fire.
        """

        with self._lock:
            self._closed = True
            self._listeners.clear()

    # -- local cache -----------------------------------------------------

    def _read_local(self) -> Any:
        try:
            raw = self._local.get_item(self.cache_key)
        except StorageError:
            logger.exception("Local cache read failed for %s", self.cache_key)
            raw = None

        if raw is None:
            return copy.deepcopy(self._default)
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unparseable cached value for %s", self.cache_key)
            return copy.deepcopy(self._default)

    def _write_local(self, serialized: str) -> None:
        self._local.set_item(self.cache_key, serialized)
