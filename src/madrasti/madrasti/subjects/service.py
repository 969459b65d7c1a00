from __future__ import annotations

from typing import List

from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from ..sync.school_store import SchoolStore
from .model import DEFAULT_SUBJECT_COLOR, Subject


class SubjectService:
    def __init__(self, store: SchoolStore):
        self._store = store

    def list_all(self) -> List[Subject]:
        return self._store.subjects.list_all()

    def add(self, *, name: str, color: str = "") -> Subject:
        subject = Subject(
            id=new_id("sub"),
            school_id=self._store.school_id,
            name=require_non_empty(name, "اسم المادة"),
            color=(color or "").strip() or DEFAULT_SUBJECT_COLOR,
        )
        self._store.subjects.append(subject)
        return subject

    def delete(self, subject_id: str) -> None:
        if not self._store.subjects.remove(lambda s: s.id == subject_id):
            raise NotFoundError("المادة غير موجودة")
