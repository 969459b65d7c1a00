from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from ..roster.parser import normalize_phone
from ..sync.school_store import SchoolStore
from .model import Student


class StudentService:
    def __init__(self, store: SchoolStore):
        self._store = store

    def list_all(self) -> List[Student]:
        return self._store.students.list_all()

    def list_by_class(self, class_id: str) -> List[Student]:
        return [s for s in self.list_all() if s.class_id == class_id]

    def search(self, term: str, *, class_id: Optional[str] = None) -> List[Student]:
        term = (term or "").strip()
        students = self.list_by_class(class_id) if class_id else self.list_all()
        if not term:
            return students
        return [s for s in students if term in s.name or term in s.parent_phone]

    def get(self, student_id: str) -> Student:
        found = self._store.students.find(lambda s: s.id == student_id)
        if not found:
            raise NotFoundError("الطالب غير موجود")
        return found

    def add(self, *, name: str, class_id: str, parent_phone: str = "") -> Student:
        student = Student(
            id=new_id("s"),
            school_id=self._store.school_id,
            name=require_non_empty(name, "اسم الطالب"),
            class_id=require_non_empty(class_id, "الفصل"),
            parent_phone=normalize_phone(parent_phone),
        )
        self._store.students.append(student)
        return student

    def update(
        self,
        student_id: str,
        *,
        name: Optional[str] = None,
        class_id: Optional[str] = None,
        parent_phone: Optional[str] = None,
    ) -> Student:
        current = self.get(student_id)
        updated = replace(
            current,
            name=require_non_empty(name, "اسم الطالب") if name is not None else current.name,
            class_id=require_non_empty(class_id, "الفصل") if class_id is not None else current.class_id,
            parent_phone=normalize_phone(parent_phone) if parent_phone is not None else current.parent_phone,
        )
        self._store.students.mutate(lambda items: [updated if s.id == student_id else s for s in items])
        return updated

    def delete(self, student_id: str) -> None:
        if not self._store.students.remove(lambda s: s.id == student_id):
            raise NotFoundError("الطالب غير موجود")

    def clear_all(self) -> int:
        count = len(self.list_all())
        self._store.students.save_all([])
        return count
