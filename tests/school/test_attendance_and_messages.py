from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

import pytest

from src.madrasti.madrasti.attendance.service import AttendanceService
from src.madrasti.madrasti.classes.service import ClassService
from src.madrasti.madrasti.core.enums import AttendanceStatus, MessageType
from src.madrasti.madrasti.core.exceptions import NotFoundError, ValidationError
from src.madrasti.madrasti.messages.service import MessageService
from src.madrasti.madrasti.students.service import StudentService
from src.madrasti.madrasti.teachers.service import TeacherService

NOW = datetime(2024, 9, 5, 9, 30, tzinfo=timezone.utc)
DAY = "2024-09-05"


@pytest.fixture()
def roster(store):
    a = ClassService(store).add(name="الصف الأول - 1")
    b = ClassService(store).add(name="الصف الثاني - 1")
    students = StudentService(store)
    s1 = students.add(name="أحمد", class_id=a.id, parent_phone="0501111111")
    s2 = students.add(name="بدر", class_id=b.id, parent_phone="0502222222")
    s3 = students.add(name="تركي", class_id=a.id)
    return a, b, s1, s2, s3


@pytest.fixture()
def attendance(store):
    return AttendanceService(store, clock=lambda: NOW)


def test_mark_is_one_record_per_student_and_day(store, attendance, roster):
    _, _, s1, _, _ = roster

    attendance.mark(student_id=s1.id, date=DAY, status=AttendanceStatus.ABSENT)
    attendance.mark(student_id=s1.id, date=DAY, status=AttendanceStatus.EXCUSED)

    records = attendance.records_for_date(DAY)
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.EXCUSED


def test_mark_validates_input(attendance, roster):
    _, _, s1, _, _ = roster
    with pytest.raises(ValidationError):
        attendance.mark(student_id=s1.id, date="05/09/2024", status=AttendanceStatus.ABSENT)
    with pytest.raises(NotFoundError):
        attendance.mark(student_id="ghost", date=DAY, status=AttendanceStatus.ABSENT)


def test_toggle_absence_flips(attendance, roster):
    _, _, s1, _, _ = roster

    assert attendance.toggle_absence(student_id=s1.id, date=DAY, reported_by="t1").status == AttendanceStatus.ABSENT
    assert attendance.toggle_absence(student_id=s1.id, date=DAY).status == AttendanceStatus.PRESENT


def test_absent_students_filtered_by_class(attendance, roster):
    a, _, s1, s2, s3 = roster
    for s in (s1, s2):
        attendance.mark(student_id=s.id, date=DAY, status=AttendanceStatus.ABSENT)
    attendance.mark(student_id=s3.id, date=DAY, status=AttendanceStatus.PRESENT)

    assert [r.name for r in attendance.absent_students(DAY)] == ["أحمد", "بدر"]
    rows = attendance.absent_students(DAY, class_id=a.id)
    assert [(r.name, r.class_name) for r in rows] == [("أحمد", "الصف الأول - 1")]


def test_absence_counts_across_days(attendance, roster):
    _, _, s1, s2, _ = roster
    attendance.mark(student_id=s1.id, date="2024-09-01", status=AttendanceStatus.ABSENT)
    attendance.mark(student_id=s1.id, date="2024-09-02", status=AttendanceStatus.ABSENT)
    attendance.mark(student_id=s2.id, date="2024-09-02", status=AttendanceStatus.EXCUSED)

    assert attendance.absence_counts() == {s1.id: 2}


def test_daily_archive_is_a_snapshot(attendance, roster):
    _, _, s1, _, _ = roster
    attendance.mark(student_id=s1.id, date=DAY, status=AttendanceStatus.ABSENT)

    archive = attendance.archive_daily_absences(DAY)
    attendance.mark(student_id=s1.id, date=DAY, status=AttendanceStatus.PRESENT)

    stored = attendance.get_archive(archive.id)
    assert [r.name for r in stored.absent_students] == ["أحمد"]
    assert attendance.report_from_archive(stored).total == 1

    attendance.delete_archive(archive.id)
    assert attendance.list_archives() == []


def test_export_csv_has_bom_and_rows(attendance, roster):
    _, _, s1, _, _ = roster
    attendance.mark(student_id=s1.id, date=DAY, status=AttendanceStatus.ABSENT)

    data = attendance.export_csv(DAY)

    assert data.startswith(b"\xef\xbb\xbf")
    rows = list(csv.DictReader(io.StringIO(data.decode("utf-8-sig"))))
    assert rows == [
        {"date": DAY, "class_name": "الصف الأول - 1", "student_name": "أحمد", "parent_phone": "0501111111"}
    ]
    assert attendance.absence_report(DAY).filename == "absences_20240905.csv"


@pytest.fixture()
def messaging(store):
    teachers = TeacherService(store)
    t1 = teachers.create(name="أستاذ أ", username="t1", password="pass1")
    t2 = teachers.create(name="أستاذ ب", username="t2", password="pass1")
    return MessageService(store, clock=lambda: NOW), t1, t2


def test_admin_broadcast_is_an_announcement(messaging):
    messages, t1, t2 = messaging

    msg = messages.send_from_admin(receiver_id="all", content="اجتماع غداً")

    assert msg.type == MessageType.ANNOUNCEMENT
    assert [m.id for m in messages.teacher_inbox(t1.id)] == [msg.id]
    assert [m.id for m in messages.teacher_inbox(t2.id)] == [msg.id]


def test_direct_messages_and_conversation(messaging):
    messages, t1, t2 = messaging

    to_t1 = messages.send_from_admin(receiver_id=t1.id, content="مرحبا")
    reply = messages.send_to_admin(teacher_id=t1.id, content="أهلاً")
    messages.send_to_admin(teacher_id=t2.id, content="سؤال")

    assert to_t1.type == MessageType.DIRECT
    assert reply.sender_name == "أستاذ أ"
    assert {m.id for m in messages.conversation(t1.id)} == {to_t1.id, reply.id}
    assert messages.teacher_inbox(t2.id)[0].content == "سؤال"
    assert messages.unread_count("admin") == 2


def test_mark_read_by_sender(messaging):
    messages, t1, t2 = messaging
    messages.send_to_admin(teacher_id=t1.id, content="1")
    messages.send_to_admin(teacher_id=t2.id, content="2")

    assert messages.mark_read("admin", sender_id=t1.id) == 1
    assert messages.unread_count("admin") == 1


def test_message_validation(messaging):
    messages, t1, _ = messaging
    with pytest.raises(ValidationError):
        messages.send_from_admin(receiver_id=t1.id, content="  ")
    with pytest.raises(NotFoundError):
        messages.send_from_admin(receiver_id="ghost", content="x")
