from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class WeekInfo:
    start_date: str = ""
    end_date: str = ""
    week_number: str = "الأسبوع الأول"
    semester: str = "الأول"

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "weekNumber": self.week_number,
            "semester": self.semester,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "WeekInfo":
        return cls(
            start_date=str(d.get("startDate") or ""),
            end_date=str(d.get("endDate") or ""),
            week_number=str(d.get("weekNumber") or ""),
            semester=str(d.get("semester") or ""),
        )


@dataclass(frozen=True)
class PlanEntry:
    """Lesson plan of one period. Unique per (class_id, day_index, period)."""

    id: str
    class_id: str
    day_index: int
    period: int
    lesson_topic: str = ""
    homework: str = ""
    notes: Optional[str] = None

    @property
    def natural_key(self) -> Tuple[str, int, int]:
        return (self.class_id, self.day_index, self.period)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "classId": self.class_id,
            "dayIndex": self.day_index,
            "period": self.period,
            "lessonTopic": self.lesson_topic,
            "homework": self.homework,
        }
        if self.notes is not None:
            d["notes"] = self.notes
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "PlanEntry":
        return cls(
            id=str(d["id"]),
            class_id=str(d.get("classId") or ""),
            day_index=int(d.get("dayIndex") or 0),
            period=int(d.get("period") or 0),
            lesson_topic=str(d.get("lessonTopic") or ""),
            homework=str(d.get("homework") or ""),
            notes=d.get("notes"),
        )


@dataclass(frozen=True)
class ArchivedPlan:
    id: str
    school_id: str
    archived_date: str
    week_info: WeekInfo
    name: str
    class_name: str
    entries: Tuple[PlanEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolId": self.school_id,
            "archivedDate": self.archived_date,
            "weekInfo": self.week_info.to_dict(),
            "entries": [e.to_dict() for e in self.entries],
            "name": self.name,
            "className": self.class_name,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ArchivedPlan":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            archived_date=str(d.get("archivedDate") or ""),
            week_info=WeekInfo.from_dict(d.get("weekInfo") or {}),
            name=str(d.get("name") or ""),
            class_name=str(d.get("className") or ""),
            entries=tuple(PlanEntry.from_dict(e) for e in d.get("entries") or ()),
        )
