from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SUBJECT_COLOR = "text-blue-600 bg-blue-50 border-blue-200"

SUBJECT_COLORS = (
    ("أزرق", "text-blue-600 bg-blue-50 border-blue-200"),
    ("أخضر", "text-emerald-600 bg-emerald-50 border-emerald-200"),
    ("أرجواني", "text-purple-600 bg-purple-50 border-purple-200"),
    ("برتقالي", "text-orange-600 bg-orange-50 border-orange-200"),
    ("أحمر", "text-rose-600 bg-rose-50 border-rose-200"),
    ("أصفر", "text-amber-600 bg-amber-50 border-amber-200"),
    ("سماوي", "text-cyan-600 bg-cyan-50 border-cyan-200"),
    ("رمادي", "text-slate-600 bg-slate-50 border-slate-200"),
)


@dataclass(frozen=True)
class Subject:
    id: str
    school_id: str
    name: str
    color: str = DEFAULT_SUBJECT_COLOR

    def to_dict(self) -> dict:
        return {"id": self.id, "schoolId": self.school_id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, d: dict) -> "Subject":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            name=str(d.get("name") or ""),
            color=str(d.get("color") or DEFAULT_SUBJECT_COLOR),
        )
