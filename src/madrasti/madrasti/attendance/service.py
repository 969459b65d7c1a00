from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..common.datetime_utils import now_utc, parse_iso_date, to_iso
from ..common.ids import new_id
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..sync.school_store import SchoolStore
from .model import AbsentStudentRow, ArchivedAttendance, AttendanceRecord
from .report import AbsenceReport, absence_report_csv

logger = logging.getLogger(__name__)


def _record_key(r: AttendanceRecord):
    return r.natural_key


def _check_date(value: str) -> str:
    try:
        return parse_iso_date(value).isoformat()
    except (TypeError, ValueError):
        raise ValidationError("التاريخ غير صالح (YYYY-MM-DD)")


class AttendanceService:
    def __init__(self, store: SchoolStore, *, clock: Callable[[], datetime] = now_utc):
        self._store = store
        self._clock = clock

    def today(self) -> str:
        return self._clock().date().isoformat()

    def records_for_date(self, date: str) -> List[AttendanceRecord]:
        date = _check_date(date)
        return [r for r in self._store.attendance.list_all() if r.date == date]

    def status_of(self, student_id: str, date: str) -> Optional[AttendanceStatus]:
        date = _check_date(date)
        found = self._store.attendance.find(lambda r: r.natural_key == (student_id, date))
        return found.status if found else None

    def mark(
        self,
        *,
        student_id: str,
        date: str,
        status: AttendanceStatus,
        reported_by: Optional[str] = None,
    ) -> AttendanceRecord:
        """Record the status of one student on one day, replacing any earlier mark."""

        date = _check_date(date)
        if not self._store.students.find(lambda s: s.id == student_id):
            raise NotFoundError("الطالب غير موجود")

        record = AttendanceRecord(
            date=date,
            student_id=student_id,
            status=AttendanceStatus(status),
            reported_by=reported_by,
            timestamp=to_iso(self._clock()),
        )
        self._store.attendance.upsert(record, key=_record_key)
        return record

    def toggle_absence(self, *, student_id: str, date: str, reported_by: Optional[str] = None) -> AttendanceRecord:
        current = self.status_of(student_id, date)
        status = AttendanceStatus.PRESENT if current == AttendanceStatus.ABSENT else AttendanceStatus.ABSENT
        return self.mark(student_id=student_id, date=date, status=status, reported_by=reported_by)

    def absent_students(self, date: str, class_id: Optional[str] = None) -> List[AbsentStudentRow]:
        absent_ids = {r.student_id for r in self.records_for_date(date) if r.status == AttendanceStatus.ABSENT}
        class_names = {c.id: c.name for c in self._store.classes.list_all()}

        rows = []
        for student in self._store.students.list_all():
            if student.id not in absent_ids:
                continue
            if class_id and student.class_id != class_id:
                continue
            rows.append(
                AbsentStudentRow(
                    id=student.id,
                    name=student.name,
                    parent_phone=student.parent_phone,
                    class_name=class_names.get(student.class_id, ""),
                )
            )
        return sorted(rows, key=lambda r: (r.class_name, r.name))

    def absence_counts(self) -> Dict[str, int]:
        """Total days absent per student id, over all recorded dates."""

        return dict(Counter(r.student_id for r in self._store.attendance.list_all() if r.status == AttendanceStatus.ABSENT))

    def archive_daily_absences(self, date: str) -> ArchivedAttendance:
        date = _check_date(date)
        archive = ArchivedAttendance(
            id=new_id("att_arch"),
            school_id=self._store.school_id,
            report_date=date,
            archived_at=to_iso(self._clock()),
            absent_students=tuple(self.absent_students(date)),
        )
        self._store.attendance_archives.append(archive)
        logger.info(
            "Archived absences school=%s date=%s count=%d",
            self._store.school_id,
            date,
            len(archive.absent_students),
        )
        return archive

    def list_archives(self) -> List[ArchivedAttendance]:
        return sorted(self._store.attendance_archives.list_all(), key=lambda a: a.report_date, reverse=True)

    def get_archive(self, archive_id: str) -> ArchivedAttendance:
        found = self._store.attendance_archives.find(lambda a: a.id == archive_id)
        if not found:
            raise NotFoundError("الأرشيف غير موجود")
        return found

    def delete_archive(self, archive_id: str) -> None:
        if not self._store.attendance_archives.remove(lambda a: a.id == archive_id):
            raise NotFoundError("الأرشيف غير موجود")

    def absence_report(self, date: str, class_id: Optional[str] = None) -> AbsenceReport:
        date = _check_date(date)
        return AbsenceReport(date=date, rows=self.absent_students(date, class_id))

    def export_csv(self, date: str, class_id: Optional[str] = None) -> bytes:
        return absence_report_csv(self.absence_report(date, class_id))

    def report_from_archive(self, archive: ArchivedAttendance) -> AbsenceReport:
        return AbsenceReport(date=archive.report_date, rows=list(archive.absent_students))
