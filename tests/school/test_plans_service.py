from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.madrasti.madrasti.classes.service import ClassService
from src.madrasti.madrasti.core.exceptions import NotFoundError, ValidationError
from src.madrasti.madrasti.plans.service import PlanService
from src.madrasti.madrasti.schedules.service import ScheduleService
from src.madrasti.madrasti.settings.service import SettingsService
from src.madrasti.madrasti.subjects.service import SubjectService
from src.madrasti.madrasti.teachers.service import TeacherService

NOW = datetime(2024, 9, 5, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def plans(store):
    return PlanService(store, clock=lambda: NOW)


@pytest.fixture()
def group(store):
    return ClassService(store).add(name="الصف الأول - 1")


def test_save_entry_is_an_upsert_keeping_the_id(plans, group):
    first = plans.save_entry(class_id=group.id, day_index=0, period=1, lesson_topic="الكسور")
    second = plans.save_entry(class_id=group.id, day_index=0, period=1, lesson_topic="الكسور العشرية", homework="تمرين 3")

    entries = plans.entries_for_class(group.id)
    assert len(entries) == 1
    assert second.id == first.id
    assert entries[0].homework == "تمرين 3"


def test_update_field_creates_then_edits(plans, group):
    plans.update_field(class_id=group.id, day_index=1, period=2, field="homework", value="حل ص 10")
    entry = plans.update_field(class_id=group.id, day_index=1, period=2, field="lessonTopic", value="الجمع")

    assert entry.homework == "حل ص 10"
    assert entry.lesson_topic == "الجمع"

    with pytest.raises(ValidationError):
        plans.update_field(class_id=group.id, day_index=1, period=2, field="teacherId", value="x")


def test_archive_names_by_class_and_week(store, plans, group):
    SettingsService(store).update_week({"weekNumber": "الأسبوع الثاني"})
    plans.save_entry(class_id=group.id, day_index=0, period=1, lesson_topic="مقدمة")

    archive = plans.archive_class_plan(group.id)

    assert archive.name == "الصف الأول - 1 - الأسبوع الثاني"
    assert archive.archived_date == "2024-09-05"
    assert [e.lesson_topic for e in archive.entries] == ["مقدمة"]
    assert plans.list_archives() == [archive]


def test_archive_survives_clear_and_delete(plans, group):
    plans.save_entry(class_id=group.id, day_index=0, period=1, lesson_topic="مقدمة")
    archive = plans.archive_class_plan(group.id)

    plans.clear_plans()

    assert plans.entries_for_class(group.id) == []
    view = plans.archive_view(archive.id)
    assert view.cell(0, 1).lesson_topic == "مقدمة"

    plans.delete_archive(archive.id)
    with pytest.raises(NotFoundError):
        plans.get_archive(archive.id)


def test_weekly_grid_joins_schedule_and_plan(store, plans, group):
    subject = SubjectService(store).add(name="رياضيات")
    teacher = TeacherService(store).create(name="أستاذ علي", username="ali", password="pass1")
    ScheduleService(store).assign(class_id=group.id, day_index=3, period=4, subject_id=subject.id, teacher_id=teacher.id)
    plans.save_entry(class_id=group.id, day_index=3, period=4, lesson_topic="الضرب", homework="ص 12")

    view = plans.build_weekly_grid(group.id)

    assert len(view.cells) == 5
    assert all(len(row) == 7 for row in view.cells)
    cell = view.cell(3, 4)
    assert (cell.subject_name, cell.teacher_name, cell.lesson_topic, cell.homework) == ("رياضيات", "أستاذ علي", "الضرب", "ص 12")
    assert view.cell(0, 1).subject_name == ""


def test_grid_for_unknown_class(plans):
    with pytest.raises(NotFoundError):
        plans.build_weekly_grid("missing")


def test_missing_day_is_a_validation_error(plans, group):
    with pytest.raises(ValidationError):
        plans.get_entry(class_id=group.id, day_index=None, period=1)
    with pytest.raises(ValidationError):
        plans.update_field(class_id=group.id, day_index="x", period=1, field="homework", value="")
