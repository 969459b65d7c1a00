from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance of one student on one day. Unique per (student_id, date)."""

    date: str
    student_id: str
    status: AttendanceStatus
    reported_by: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def natural_key(self) -> Tuple[str, str]:
        return (self.student_id, self.date)

    def to_dict(self) -> dict:
        d = {"date": self.date, "studentId": self.student_id, "status": self.status.value}
        if self.reported_by is not None:
            d["reportedBy"] = self.reported_by
        if self.timestamp is not None:
            d["timestamp"] = self.timestamp
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "AttendanceRecord":
        return cls(
            date=str(d.get("date") or ""),
            student_id=str(d.get("studentId") or ""),
            status=AttendanceStatus(d.get("status") or AttendanceStatus.PRESENT.value),
            reported_by=d.get("reportedBy"),
            timestamp=d.get("timestamp"),
        )


@dataclass(frozen=True)
class AbsentStudentRow:
    """Read-model for the printable absence report."""

    id: str
    name: str
    parent_phone: str
    class_name: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "parentPhone": self.parent_phone, "className": self.class_name}

    @classmethod
    def from_dict(cls, d: dict) -> "AbsentStudentRow":
        return cls(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or ""),
            parent_phone=str(d.get("parentPhone") or ""),
            class_name=str(d.get("className") or ""),
        )


@dataclass(frozen=True)
class ArchivedAttendance:
    id: str
    school_id: str
    report_date: str
    archived_at: str
    absent_students: Tuple[AbsentStudentRow, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolId": self.school_id,
            "reportDate": self.report_date,
            "archivedAt": self.archived_at,
            "absentStudents": [s.to_dict() for s in self.absent_students],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ArchivedAttendance":
        return cls(
            id=str(d["id"]),
            school_id=str(d.get("schoolId") or ""),
            report_date=str(d.get("reportDate") or ""),
            archived_at=str(d.get("archivedAt") or ""),
            absent_students=tuple(AbsentStudentRow.from_dict(s) for s in d.get("absentStudents") or ()),
        )
