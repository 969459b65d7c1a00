from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.security import generate_password_hash

from src.madrasti.madrasti.auth.service import AuthService, verify_password
from src.madrasti.madrasti.core.constants import SYSTEM_ADMIN_PROFILE_KEY
from src.madrasti.madrasti.core.enums import Role
from src.madrasti.madrasti.core.exceptions import AuthenticationError
from src.madrasti.madrasti.teachers.service import TeacherService
from src.madrasti.madrasti.tenants.model import SchoolMetadata

NOW = datetime(2024, 9, 1, tzinfo=timezone.utc)


def _school() -> SchoolMetadata:
    return SchoolMetadata(
        id="sch_test",
        name="مدرسة الاختبار",
        created_at=NOW,
        subscription_end=NOW + timedelta(days=7),
        admin_username="admin",
        admin_password_hash=generate_password_hash("admin-pass"),
    )


def test_system_operator_login_uses_configured_hash():
    auth = AuthService(system_username="operator", system_password_hash=generate_password_hash("op-pass"))

    user = auth.authenticate_system("operator", "op-pass")

    assert user.role == Role.SYSTEM
    with pytest.raises(AuthenticationError):
        auth.authenticate_system("operator", "wrong")


def test_system_login_disabled_without_configured_credentials():
    auth = AuthService(system_username="", system_password_hash="")
    with pytest.raises(AuthenticationError):
        auth.authenticate_system("", "")


def test_remote_operator_profile_overrides_config(remote):
    remote.system_data[SYSTEM_ADMIN_PROFILE_KEY] = {
        "username": "boss",
        "passwordHash": generate_password_hash("remote-pass"),
    }
    auth = AuthService(system_username="operator", system_password_hash=generate_password_hash("op-pass"), remote=remote)

    assert auth.authenticate_system("boss", "remote-pass").name == "boss"
    with pytest.raises(AuthenticationError):
        auth.authenticate_system("operator", "op-pass")


def test_remote_outage_falls_back_to_config(remote):
    remote.fail_reads = True
    auth = AuthService(system_username="operator", system_password_hash=generate_password_hash("op-pass"), remote=remote)

    assert auth.authenticate_system("operator", "op-pass").role == Role.SYSTEM


def test_school_admin_and_teacher_login(store):
    school = _school()
    teacher = TeacherService(store).create(name="أستاذ أحمد", username="ahmad", password="t-pass")
    auth = AuthService(system_username="", system_password_hash="")

    admin = auth.authenticate_school_user(school, store, "admin", "admin-pass")
    assert admin.role == Role.ADMIN
    assert admin.school_id == "sch_test"

    t = auth.authenticate_school_user(school, store, "ahmad", "t-pass")
    assert t.role == Role.TEACHER
    assert t.teacher_id == teacher.id


def test_teacher_id_is_not_a_password(store):
    school = _school()
    teacher = TeacherService(store).create(name="أستاذ أحمد", username="ahmad", password="t-pass")
    auth = AuthService(system_username="", system_password_hash="")

    with pytest.raises(AuthenticationError):
        auth.authenticate_school_user(school, store, "ahmad", teacher.id)


def test_verify_password_rejects_garbage_hash():
    assert verify_password("not-a-hash", "x") is False
    assert verify_password("", "x") is False
