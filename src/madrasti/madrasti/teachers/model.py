from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Teacher:
    """A teacher account inside one school.

    ``username`` is the login id; only a werkzeug hash of the password is kept.
    """

    id: str
    school_id: str
    name: str
    username: str
    password_hash: str = ""
    assigned_classes: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolId": self.school_id,
            "name": self.name,
            "username": self.username,
            "passwordHash": self.password_hash,
            "assignedClasses": list(self.assigned_classes),
        }

    def to_public_dict(self) -> dict:
        d = self.to_dict()
        d.pop("passwordHash")
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Teacher":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            name=str(d.get("name") or ""),
            username=str(d.get("username") or ""),
            password_hash=str(d.get("passwordHash") or ""),
            assigned_classes=tuple(d.get("assignedClasses") or ()),
        )
