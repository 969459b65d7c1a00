from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ScheduleSlot:
    """One period of a class timetable. Unique per (class_id, day_index, period)."""

    class_id: str
    day_index: int
    period: int
    subject_id: str
    teacher_id: str

    @property
    def natural_key(self) -> Tuple[str, int, int]:
        return (self.class_id, self.day_index, self.period)

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "dayIndex": self.day_index,
            "period": self.period,
            "subjectId": self.subject_id,
            "teacherId": self.teacher_id,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ScheduleSlot":
        return cls(
            class_id=str(d.get("classId") or ""),
            day_index=int(d.get("dayIndex") or 0),
            period=int(d.get("period") or 0),
            subject_id=str(d.get("subjectId") or ""),
            teacher_id=str(d.get("teacherId") or ""),
        )
