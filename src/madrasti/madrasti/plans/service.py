from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..common.datetime_utils import now_utc
from ..common.ids import new_id
from ..core.constants import DAYS_OF_WEEK, PERIODS_PER_DAY
from ..core.exceptions import NotFoundError, ValidationError
from ..schedules.service import slot_position
from ..sync.school_store import SchoolStore
from .model import ArchivedPlan, PlanEntry

EDITABLE_FIELDS = {"lessonTopic": "lesson_topic", "homework": "homework", "notes": "notes"}


def _entry_key(e: PlanEntry) -> Tuple[str, int, int]:
    return e.natural_key


@dataclass(frozen=True)
class PlanCell:
    """One cell of the printable weekly plan."""

    day_index: int
    period: int
    subject_name: str = ""
    subject_color: str = ""
    teacher_name: str = ""
    lesson_topic: str = ""
    homework: str = ""
    notes: str = ""


@dataclass(frozen=True)
class WeeklyPlanView:
    class_id: str
    class_name: str
    days: Tuple[str, ...]
    periods: Tuple[int, ...]
    cells: Tuple[Tuple[PlanCell, ...], ...]

    def cell(self, day_index: int, period: int) -> PlanCell:
        return self.cells[day_index][period - 1]


class PlanService:
    def __init__(self, store: SchoolStore, *, clock: Callable[[], datetime] = now_utc):
        self._store = store
        self._clock = clock

    def entries_for_class(self, class_id: str) -> List[PlanEntry]:
        return [e for e in self._store.plans.list_all() if e.class_id == class_id]

    def get_entry(self, *, class_id: str, day_index: int, period: int) -> Optional[PlanEntry]:
        target = slot_position(class_id, day_index, period)
        return self._store.plans.find(lambda e: e.natural_key == target)

    def save_entry(
        self,
        *,
        class_id: str,
        day_index: int,
        period: int,
        lesson_topic: str = "",
        homework: str = "",
        notes: Optional[str] = None,
    ) -> PlanEntry:
        """Create or replace the plan entry at (class, day, period)."""

        class_id, day_index, period = slot_position(class_id, day_index, period)

        existing = self.get_entry(class_id=class_id, day_index=day_index, period=period)
        entry = PlanEntry(
            id=existing.id if existing else new_id("entry"),
            class_id=class_id,
            day_index=day_index,
            period=period,
            lesson_topic=lesson_topic or "",
            homework=homework or "",
            notes=notes,
        )
        self._store.plans.upsert(entry, key=_entry_key)
        return entry

    def update_field(self, *, class_id: str, day_index: int, period: int, field: str, value: str) -> PlanEntry:
        """Autosave of a single field from the teacher portal."""

        attr = EDITABLE_FIELDS.get(field)
        if attr is None:
            raise ValidationError(f"Unknown plan field: {field}")

        existing = self.get_entry(class_id=class_id, day_index=day_index, period=period)
        if existing is None:
            values = {"lesson_topic": "", "homework": "", "notes": None}
        else:
            values = {"lesson_topic": existing.lesson_topic, "homework": existing.homework, "notes": existing.notes}
        values[attr] = value
        return self.save_entry(class_id=class_id, day_index=day_index, period=period, **values)

    def clear_plans(self) -> None:
        self._store.plans.save_all([])

    def archive_class_plan(self, class_id: str) -> ArchivedPlan:
        group = self._store.classes.find(lambda c: c.id == class_id)
        if not group:
            raise NotFoundError("الفصل غير موجود")

        week = self._store.week.get()
        name = f"{group.name} - {week.week_number}"
        archive = ArchivedPlan(
            id=new_id("arch"),
            school_id=self._store.school_id,
            archived_date=self._clock().date().isoformat(),
            week_info=week,
            name=name,
            class_name=group.name,
            entries=tuple(self.entries_for_class(class_id)),
        )
        self._store.archives.append(archive)
        return archive

    def list_archives(self) -> List[ArchivedPlan]:
        return self._store.archives.list_all()

    def get_archive(self, archive_id: str) -> ArchivedPlan:
        found = self._store.archives.find(lambda a: a.id == archive_id)
        if not found:
            raise NotFoundError("الأرشيف غير موجود")
        return found

    def delete_archive(self, archive_id: str) -> None:
        if not self._store.archives.remove(lambda a: a.id == archive_id):
            raise NotFoundError("الأرشيف غير موجود")

    def archive_view(self, archive_id: str) -> WeeklyPlanView:
        """Grid of an archived week. Works even if the class was deleted since."""

        archive = self.get_archive(archive_id)
        class_id = archive.entries[0].class_id if archive.entries else ""
        return self.build_weekly_grid(class_id, entries=list(archive.entries), class_name=archive.class_name)

    def build_weekly_grid(
        self,
        class_id: str,
        *,
        entries: Optional[List[PlanEntry]] = None,
        class_name: Optional[str] = None,
    ) -> WeeklyPlanView:
        if class_name is None:
            group = self._store.classes.find(lambda c: c.id == class_id)
            if not group:
                raise NotFoundError("الفصل غير موجود")
            class_name = group.name

        subjects = {s.id: s for s in self._store.subjects.list_all()}
        teachers = {t.id: t for t in self._store.teachers.list_all()}
        slots = {(s.day_index, s.period): s for s in self._store.schedule.list_all() if s.class_id == class_id}
        if entries is None:
            entries = self.entries_for_class(class_id)
        by_cell = {(e.day_index, e.period): e for e in entries}

        rows = []
        for day_index in range(len(DAYS_OF_WEEK)):
            row = []
            for period in range(1, PERIODS_PER_DAY + 1):
                cell = PlanCell(day_index=day_index, period=period)
                slot = slots.get((day_index, period))
                if slot:
                    subject = subjects.get(slot.subject_id)
                    teacher = teachers.get(slot.teacher_id)
                    cell = replace(
                        cell,
                        subject_name=subject.name if subject else "",
                        subject_color=subject.color if subject else "",
                        teacher_name=teacher.name if teacher else "",
                    )
                entry = by_cell.get((day_index, period))
                if entry:
                    cell = replace(cell, lesson_topic=entry.lesson_topic, homework=entry.homework, notes=entry.notes or "")
                row.append(cell)
            rows.append(tuple(row))

        return WeeklyPlanView(
            class_id=class_id,
            class_name=class_name,
            days=DAYS_OF_WEEK,
            periods=tuple(range(1, PERIODS_PER_DAY + 1)),
            cells=tuple(rows),
        )
