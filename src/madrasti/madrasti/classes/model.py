from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_CLASS_GRADE


@dataclass(frozen=True)
class ClassGroup:
    """A class section, e.g. "الصف الأول - 1"."""

    id: str
    school_id: str
    name: str
    grade: str = DEFAULT_CLASS_GRADE

    def to_dict(self) -> dict:
        return {"id": self.id, "schoolId": self.school_id, "name": self.name, "grade": self.grade}

    @classmethod
    def from_dict(cls, d: dict) -> "ClassGroup":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            name=str(d.get("name") or ""),
            grade=str(d.get("grade") or DEFAULT_CLASS_GRADE),
        )
