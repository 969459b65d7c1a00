from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Student:
    """A student. ``class_id`` is a soft reference (no cascade)."""

    id: str
    school_id: str
    name: str
    class_id: str
    parent_phone: str = ""
    absence_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolId": self.school_id,
            "name": self.name,
            "parentPhone": self.parent_phone,
            "classId": self.class_id,
            "absenceCount": self.absence_count,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Student":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            name=str(d.get("name") or ""),
            class_id=str(d.get("classId") or ""),
            parent_phone=str(d.get("parentPhone") or ""),
            absence_count=int(d.get("absenceCount") or 0),
        )
