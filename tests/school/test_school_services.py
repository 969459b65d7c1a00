from __future__ import annotations

import pytest

from src.madrasti.madrasti.classes.service import ClassService
from src.madrasti.madrasti.core.exceptions import NotFoundError, ValidationError
from src.madrasti.madrasti.schedules.service import ScheduleService
from src.madrasti.madrasti.settings.service import SettingsService
from src.madrasti.madrasti.students.service import StudentService
from src.madrasti.madrasti.subjects.service import SubjectService
from src.madrasti.madrasti.teachers.service import TeacherService


@pytest.fixture()
def school(store):
    classes = ClassService(store)
    subjects = SubjectService(store)
    teachers = TeacherService(store)
    group = classes.add(name="الصف الأول - 1", grade="الصف الأول")
    math = subjects.add(name="رياضيات")
    teacher = teachers.create(name="أستاذ خالد", username="khalid", password="pass1")
    return store, group, math, teacher


def test_settings_partial_update_uses_wire_keys(store):
    service = SettingsService(store)

    updated = service.update_settings({"schoolName": "مدرسة الرواد", "logoUrl": None})

    assert updated.school_name == "مدرسة الرواد"
    assert updated.logo_url == ""
    assert service.get_settings().school_name == "مدرسة الرواد"
    with pytest.raises(ValidationError):
        service.update_settings({"colour": "red"})


def test_week_update(store):
    service = SettingsService(store)

    week = service.update_week({"weekNumber": "الأسبوع الثالث", "startDate": "2024-09-15"})

    assert week.week_number == "الأسبوع الثالث"
    assert service.get_week().start_date == "2024-09-15"
    with pytest.raises(ValidationError):
        service.update_week({"bogus": "1"})


def test_class_names_are_unique(store):
    classes = ClassService(store)
    classes.add(name="الصف الأول - 1")

    with pytest.raises(ValidationError):
        classes.add(name=" الصف الأول - 1 ")
    assert classes.list_all()[0].grade == "عام"


def test_student_crud_and_search(school):
    store, group, _, _ = school
    students = StudentService(store)

    s = students.add(name="عمر فاروق", class_id=group.id, parent_phone="+966501234567")
    assert s.parent_phone == "0501234567"

    students.update(s.id, name="عمر الفاروق")
    assert students.get(s.id).name == "عمر الفاروق"
    assert [x.id for x in students.search("الفاروق")] == [s.id]
    assert [x.id for x in students.search("0501234567", class_id=group.id)] == [s.id]
    assert students.search("عمر", class_id="other") == []

    students.delete(s.id)
    with pytest.raises(NotFoundError):
        students.get(s.id)


def test_clear_all_students(school):
    store, group, _, _ = school
    students = StudentService(store)
    students.add(name="أ ب", class_id=group.id)
    students.add(name="ج د", class_id=group.id)

    assert students.clear_all() == 2
    assert students.list_all() == []


def test_teacher_usernames_are_unique_and_passwords_hashed(school):
    store, _, _, teacher = school
    teachers = TeacherService(store)

    assert teacher.password_hash and teacher.password_hash != "pass1"
    assert "passwordHash" not in teacher.to_public_dict()
    with pytest.raises(ValidationError):
        teachers.create(name="آخر", username="khalid", password="pass2")
    with pytest.raises(ValidationError):
        teachers.create(name="قصير", username="short", password="123")


def test_teacher_default_username_from_name(store):
    teacher = TeacherService(store).create(name="Sara Ali", password="pass1")
    assert teacher.username == "saraali"


def test_subject_delete_unknown(store):
    with pytest.raises(NotFoundError):
        SubjectService(store).delete("missing")


def test_schedule_assign_is_an_upsert(school):
    store, group, math, teacher = school
    schedule = ScheduleService(store)
    science = SubjectService(store).add(name="علوم")

    schedule.assign(class_id=group.id, day_index=0, period=1, subject_id=math.id, teacher_id=teacher.id)
    schedule.assign(class_id=group.id, day_index=0, period=1, subject_id=science.id, teacher_id=teacher.id)
    schedule.assign(class_id=group.id, day_index=2, period=7, subject_id=math.id, teacher_id=teacher.id)

    slots = schedule.for_class(group.id)
    assert [(s.day_index, s.period, s.subject_id) for s in slots] == [(0, 1, science.id), (2, 7, math.id)]
    assert len(schedule.for_teacher(teacher.id)) == 2


@pytest.mark.parametrize("day,period", [(-1, 1), (5, 1), (0, 0), (0, 8), ("x", 1)])
def test_schedule_rejects_out_of_range(school, day, period):
    store, group, math, teacher = school
    with pytest.raises(ValidationError):
        ScheduleService(store).assign(
            class_id=group.id, day_index=day, period=period, subject_id=math.id, teacher_id=teacher.id
        )


def test_schedule_rejects_unknown_references(school):
    store, group, math, teacher = school
    schedule = ScheduleService(store)
    with pytest.raises(ValidationError):
        schedule.assign(class_id=group.id, day_index=0, period=1, subject_id="nope", teacher_id=teacher.id)
    with pytest.raises(ValidationError):
        schedule.assign(class_id="nope", day_index=0, period=1, subject_id=math.id, teacher_id=teacher.id)


def test_schedule_remove(school):
    store, group, math, teacher = school
    schedule = ScheduleService(store)
    schedule.assign(class_id=group.id, day_index=1, period=3, subject_id=math.id, teacher_id=teacher.id)

    schedule.remove(class_id=group.id, day_index=1, period=3)

    assert schedule.for_class(group.id) == []
    with pytest.raises(NotFoundError):
        schedule.remove(class_id=group.id, day_index=1, period=3)


@pytest.mark.parametrize("day_index, period", [(None, 1), ("monday", 1), (0, None), (5, 1), (0, 8)])
def test_schedule_lookup_rejects_bad_positions(school, day_index, period):
    store, group, math, teacher = school
    schedule = ScheduleService(store)

    with pytest.raises(ValidationError):
        schedule.get(class_id=group.id, day_index=day_index, period=period)
    with pytest.raises(ValidationError):
        schedule.remove(class_id=group.id, day_index=day_index, period=period)


def test_schedule_lookup_accepts_numeric_strings(school):
    store, group, math, teacher = school
    schedule = ScheduleService(store)
    schedule.assign(class_id=group.id, day_index=2, period=4, subject_id=math.id, teacher_id=teacher.id)

    assert schedule.get(class_id=group.id, day_index="2", period="4").subject_id == math.id


def test_class_search_matches_name_or_grade(store):
    classes = ClassService(store)
    first = classes.add(name="أول أ", grade="الصف الأول")
    third = classes.add(name="ثالث ب", grade="الصف الثالث")

    assert classes.search("") == [first, third]
    assert classes.search("ثالث") == [third]
    assert classes.search("الأول") == [first]
    assert classes.search("لا يوجد") == []
