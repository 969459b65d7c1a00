from __future__ import annotations

from typing import List

from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_CLASS_GRADE
from ..core.exceptions import NotFoundError, ValidationError
from ..sync.school_store import SchoolStore
from .model import ClassGroup


class ClassService:
    def __init__(self, store: SchoolStore):
        self._store = store

    def list_all(self) -> List[ClassGroup]:
        return self._store.classes.list_all()

    def search(self, term: str = "") -> List[ClassGroup]:
        """Classes whose name or grade contains ``term``; all classes for an empty term."""

        term = (term or "").strip()
        classes = self.list_all()
        if not term:
            return classes
        return [c for c in classes if term in c.name or term in (c.grade or "")]

    def get(self, class_id: str) -> ClassGroup:
        found = self._store.classes.find(lambda c: c.id == class_id)
        if not found:
            raise NotFoundError("الفصل غير موجود")
        return found

    def add(self, *, name: str, grade: str = "") -> ClassGroup:
        name = require_non_empty(name, "اسم الفصل")
        if self._store.classes.find(lambda c: c.name.strip() == name):
            raise ValidationError("يوجد فصل بنفس الاسم")

        group = ClassGroup(
            id=new_id("c"),
            school_id=self._store.school_id,
            name=name,
            grade=(grade or "").strip() or DEFAULT_CLASS_GRADE,
        )
        self._store.classes.append(group)
        return group

    def delete(self, class_id: str) -> None:
        # Students and schedule slots keep their (now dangling) class id.
        if not self._store.classes.remove(lambda c: c.id == class_id):
            raise NotFoundError("الفصل غير موجود")
