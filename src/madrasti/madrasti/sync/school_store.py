from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

from ..attendance.model import ArchivedAttendance, AttendanceRecord
from ..classes.model import ClassGroup
from ..core import constants as c
from ..core.exceptions import ValidationError
from ..messages.model import Message
from ..plans.model import ArchivedPlan, PlanEntry, WeekInfo
from ..schedules.model import ScheduleSlot
from ..settings.model import SchoolSettings, default_settings
from ..storage.local_cache import LocalCache
from ..storage.remote_store import RemoteStore
from ..students.model import Student
from ..subjects.model import Subject
from ..teachers.model import Teacher
from .scheduler import Scheduler
from .slot_repository import SlotListRepository, SlotValueRepository
from .synced_slot import SyncedSlot

logger = logging.getLogger(__name__)


class SchoolStore:
    """All state slots of one school.

    Slots are independent: there is no transaction across them. Callers that
    touch two slots (archiving a plan, importing a roster) do two writes.
    """

    def __init__(
        self,
        school_id: str,
        *,
        local: LocalCache,
        remote: Optional[RemoteStore] = None,
        cloud_enabled: bool = False,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = c.DEFAULT_DEBOUNCE_SECONDS,
        school_name: str = "",
    ):
        if not school_id or not str(school_id).strip():
            raise ValidationError("School id is required")
        self.school_id = str(school_id)

        def slot(key: str, default) -> SyncedSlot:
            return SyncedSlot(
                self.school_id,
                key,
                default,
                local=local,
                remote=remote,
                cloud_enabled=cloud_enabled,
                scheduler=scheduler,
                debounce_seconds=debounce_seconds,
            )

        self.settings = SlotValueRepository(slot(c.SLOT_SETTINGS, default_settings(school_name).to_dict()), SchoolSettings)
        self.week = SlotValueRepository(slot(c.SLOT_WEEK, WeekInfo().to_dict()), WeekInfo)
        self.subjects = SlotListRepository(slot(c.SLOT_SUBJECTS, []), Subject)
        self.classes = SlotListRepository(slot(c.SLOT_CLASSES, []), ClassGroup)
        self.schedule = SlotListRepository(slot(c.SLOT_SCHEDULE, []), ScheduleSlot)
        self.students = SlotListRepository(slot(c.SLOT_STUDENTS, []), Student)
        self.teachers = SlotListRepository(slot(c.SLOT_TEACHERS, []), Teacher)
        self.plans = SlotListRepository(slot(c.SLOT_PLANS, []), PlanEntry)
        self.archives = SlotListRepository(slot(c.SLOT_ARCHIVES, []), ArchivedPlan)
        self.attendance = SlotListRepository(slot(c.SLOT_ATTENDANCE, []), AttendanceRecord)
        self.messages = SlotListRepository(slot(c.SLOT_MESSAGES, []), Message)
        self.attendance_archives = SlotListRepository(slot(c.SLOT_ATTENDANCE_ARCHIVES, []), ArchivedAttendance)

    def slots(self) -> List[SyncedSlot]:
        repos = (
            self.settings,
            self.week,
            self.subjects,
            self.classes,
            self.schedule,
            self.students,
            self.teachers,
            self.plans,
            self.archives,
            self.attendance,
            self.messages,
            self.attendance_archives,
        )
        return [r.slot for r in repos]

    @property
    def is_loaded(self) -> bool:
        return all(s.is_loaded for s in self.slots())

    def start(self) -> None:
        for s in self.slots():
            s.start()

    def wait_until_loaded(self, timeout: Optional[float] = None) -> bool:
        """Block until every slot finished its first fetch. ``timeout`` bounds the whole wait."""

        if timeout is None:
            return all(s.wait_loaded() for s in self.slots())
        deadline = time.monotonic() + timeout
        return all(s.wait_loaded(max(0.0, deadline - time.monotonic())) for s in self.slots())

    def flush(self) -> int:
        return sum(1 for s in self.slots() if s.flush())

    def close(self) -> None:
        for s in self.slots():
            s.close()


class SchoolStoreFactory:
    """Hands out one started SchoolStore per (school_id, cloud_enabled).

    Reopening the same school reuses the store, so its remote fetch happens once.
    """

    def __init__(
        self,
        *,
        local: LocalCache,
        remote: Optional[RemoteStore] = None,
        cloud_enabled: bool = False,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = c.DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._local = local
        self._remote = remote
        self._cloud_enabled = bool(cloud_enabled)
        self._scheduler = scheduler
        self._debounce = float(debounce_seconds)
        self._stores: Dict[Tuple[str, bool], SchoolStore] = {}
        self._lock = threading.Lock()

    def open(self, school_id: str, *, school_name: str = "") -> SchoolStore:
        key = (str(school_id), self._cloud_enabled)
        with self._lock:
            store = self._stores.get(key)
            if store is None:
                store = SchoolStore(
                    school_id,
                    local=self._local,
                    remote=self._remote,
                    cloud_enabled=self._cloud_enabled,
                    scheduler=self._scheduler,
                    debounce_seconds=self._debounce,
                    school_name=school_name,
                )
                self._stores[key] = store
                store.start()
            return store

    def evict(self, school_id: str) -> None:
        with self._lock:
            store = self._stores.pop((str(school_id), self._cloud_enabled), None)
        if store is not None:
            store.close()

    def close_all(self) -> None:
        """Shutdown hook: detach every store and push pending remote writes now."""

        with self._lock:
            stores = list(self._stores.values())
            self._stores.clear()
        for store in stores:
            store.close()
            flushed = store.flush()
            if flushed:
                logger.info("Flushed %d pending writes for school %s", flushed, store.school_id)
