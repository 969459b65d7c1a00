from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest

from src.madrasti.madrasti.core.exceptions import RemoteStoreError
from src.madrasti.madrasti.storage.local_cache import MemoryCache
from src.madrasti.madrasti.sync.school_store import SchoolStore


@dataclass
class _Timer:
    due: float
    fn: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for ThreadingScheduler.

    Timers fire only when the test calls ``advance``; submitted fetches run
    only on ``run_pending``.
    """

    def __init__(self):
        self.now = 0.0
        self.timers: list[_Timer] = []
        self.submitted: list[Callable[[], None]] = []

    def call_later(self, delay: float, fn: Callable[[], None]) -> _Timer:
        timer = _Timer(due=self.now + delay, fn=fn)
        self.timers.append(timer)
        return timer

    def submit(self, fn: Callable[[], None]) -> None:
        self.submitted.append(fn)

    def run_pending(self) -> int:
        jobs, self.submitted = self.submitted, []
        for fn in jobs:
            fn()
        return len(jobs)

    def advance(self, seconds: float) -> int:
        self.now += seconds
        fired = 0
        for timer in sorted(self.timers, key=lambda t: t.due):
            if timer.cancelled or timer.due > self.now:
                continue
            timer.cancelled = True
            timer.fn()
            fired += 1
        self.timers = [t for t in self.timers if not t.cancelled]
        return fired

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)


@dataclass
class FakeRemoteStore:
    school_data: dict = field(default_factory=dict)
    system_data: dict = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    writes: list = field(default_factory=list)

    def load_school_data(self, school_id: str, slot_key: str) -> Optional[Any]:
        if self.fail_reads:
            raise RemoteStoreError("remote unavailable")
        return copy.deepcopy(self.school_data.get((school_id, slot_key)))

    def save_school_data(self, school_id: str, slot_key: str, value: Any) -> None:
        if self.fail_writes:
            raise RemoteStoreError("remote unavailable")
        self.writes.append((school_id, slot_key, copy.deepcopy(value)))
        self.school_data[(school_id, slot_key)] = copy.deepcopy(value)

    def load_system_data(self, key: str) -> Optional[Any]:
        if self.fail_reads:
            raise RemoteStoreError("remote unavailable")
        return copy.deepcopy(self.system_data.get(key))

    def save_system_data(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise RemoteStoreError("remote unavailable")
        self.writes.append(("system", key, copy.deepcopy(value)))
        self.system_data[key] = copy.deepcopy(value)

    def writes_for(self, slot_key: str) -> list:
        return [w for w in self.writes if w[1] == slot_key]


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def store(cache, scheduler) -> SchoolStore:
    """Local-only school store, already loaded."""

    s = SchoolStore("sch_test", local=cache, scheduler=scheduler, school_name="مدرسة الاختبار")
    s.start()
    return s
