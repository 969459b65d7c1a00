from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..common.validators import require_in_range, require_non_empty
from ..core.constants import DAYS_OF_WEEK, PERIODS_PER_DAY
from ..core.exceptions import NotFoundError, ValidationError
from ..sync.school_store import SchoolStore
from .model import ScheduleSlot


def _slot_key(s: ScheduleSlot) -> Tuple[str, int, int]:
    return s.natural_key


def slot_position(class_id: str, day_index, period) -> Tuple[str, int, int]:
    """Validated (class, day, period) triple; raises ValidationError on bad input."""

    return (
        require_non_empty(class_id, "الفصل"),
        require_in_range(day_index, "اليوم", 0, len(DAYS_OF_WEEK) - 1),
        require_in_range(period, "الحصة", 1, PERIODS_PER_DAY),
    )


class ScheduleService:
    def __init__(self, store: SchoolStore):
        self._store = store

    def assign(self, *, class_id: str, day_index: int, period: int, subject_id: str, teacher_id: str) -> ScheduleSlot:
        """Create or replace the slot at (class, day, period)."""

        class_id, day_index, period = slot_position(class_id, day_index, period)
        subject_id = require_non_empty(subject_id, "المادة")
        teacher_id = require_non_empty(teacher_id, "المعلم")

        if not self._store.classes.find(lambda c: c.id == class_id):
            raise ValidationError("الفصل غير موجود")
        if not self._store.subjects.find(lambda s: s.id == subject_id):
            raise ValidationError("المادة غير موجودة")
        if not self._store.teachers.find(lambda t: t.id == teacher_id):
            raise ValidationError("المعلم غير موجود")

        slot = ScheduleSlot(
            class_id=class_id,
            day_index=day_index,
            period=period,
            subject_id=subject_id,
            teacher_id=teacher_id,
        )
        self._store.schedule.upsert(slot, key=_slot_key)
        return slot

    def remove(self, *, class_id: str, day_index: int, period: int) -> None:
        target = slot_position(class_id, day_index, period)
        if not self._store.schedule.remove(lambda s: s.natural_key == target):
            raise NotFoundError("الحصة غير موجودة")

    def get(self, *, class_id: str, day_index: int, period: int) -> Optional[ScheduleSlot]:
        target = slot_position(class_id, day_index, period)
        return self._store.schedule.find(lambda s: s.natural_key == target)

    def for_class(self, class_id: str) -> List[ScheduleSlot]:
        slots = [s for s in self._store.schedule.list_all() if s.class_id == class_id]
        return sorted(slots, key=lambda s: (s.day_index, s.period))

    def for_teacher(self, teacher_id: str) -> List[ScheduleSlot]:
        slots = [s for s in self._store.schedule.list_all() if s.teacher_id == teacher_id]
        return sorted(slots, key=lambda s: (s.day_index, s.period))

    def grid(self, class_id: str) -> Dict[Tuple[int, int], ScheduleSlot]:
        return {(s.day_index, s.period): s for s in self.for_class(class_id)}
