from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from werkzeug.security import generate_password_hash

from ..common.ids import new_id
from ..common.validators import require_min_length, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..sync.school_store import SchoolStore
from .model import Teacher


def default_username(name: str) -> str:
    return "".join(name.split()).lower()


class TeacherService:
    """Use case: manage teacher accounts (school admin)."""

    def __init__(self, store: SchoolStore):
        self._store = store

    def list_all(self) -> List[Teacher]:
        return self._store.teachers.list_all()

    def get(self, teacher_id: str) -> Teacher:
        found = self._store.teachers.find(lambda t: t.id == teacher_id)
        if not found:
            raise NotFoundError("المعلم غير موجود")
        return found

    def _ensure_unique_username(self, username: str, *, exclude_id: Optional[str] = None) -> None:
        if self._store.teachers.find(lambda t: t.username == username and t.id != exclude_id):
            raise ValidationError("اسم المستخدم مستخدم مسبقاً")

    def create(self, *, name: str, password: str, username: str = "") -> Teacher:
        name = require_non_empty(name, "اسم المعلم")
        require_min_length(password, "كلمة المرور", 4)
        username = (username or "").strip() or default_username(name)
        self._ensure_unique_username(username)

        teacher = Teacher(
            id=new_id("t"),
            school_id=self._store.school_id,
            name=name,
            username=username,
            password_hash=generate_password_hash(password),
        )
        self._store.teachers.append(teacher)
        return teacher

    def update(
        self,
        teacher_id: str,
        *,
        name: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Teacher:
        current = self.get(teacher_id)
        new_username = require_non_empty(username, "اسم المستخدم") if username is not None else current.username
        if new_username != current.username:
            self._ensure_unique_username(new_username, exclude_id=teacher_id)

        password_hash = current.password_hash
        if password:
            require_min_length(password, "كلمة المرور", 4)
            password_hash = generate_password_hash(password)

        updated = replace(
            current,
            name=require_non_empty(name, "اسم المعلم") if name is not None else current.name,
            username=new_username,
            password_hash=password_hash,
        )
        self._store.teachers.mutate(lambda items: [updated if t.id == teacher_id else t for t in items])
        return updated

    def delete(self, teacher_id: str) -> None:
        if not self._store.teachers.remove(lambda t: t.id == teacher_id):
            raise NotFoundError("المعلم غير موجود")
