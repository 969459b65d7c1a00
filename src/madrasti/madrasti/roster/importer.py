from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..classes.model import ClassGroup
from ..common.ids import new_id
from ..core.constants import DEFAULT_CLASS_GRADE
from ..core.enums import SlotWriteStatus
from ..core.exceptions import ImportFileError, StoreNotReadyError
from ..students.model import Student
from ..sync.school_store import SchoolStore
from .parser import ParsedRoster, parse_roster, parse_rows, sheet_cells

logger = logging.getLogger(__name__)

XLSX_MAGIC = b"PK\x03\x04"
LEGACY_XLS_MAGIC = b"\xd0\xcf\x11\xe0"


def base_grade(grade: str) -> str:
    return (grade or "").split("_")[0].strip()


def shorten_grade(grade: str) -> str:
    return " ".join(base_grade(grade).split()[:2])


def class_label(grade: str, section: str) -> str:
    """Class name for an imported row: "الصف الأول - 1", else section, else grade."""

    short = shorten_grade(grade)
    section = (section or "").strip()
    if short and section:
        return f"{short} - {section}"
    return section or short or DEFAULT_CLASS_GRADE


@dataclass(frozen=True)
class ImportResult:
    new_classes: Tuple[ClassGroup, ...] = field(default_factory=tuple)
    new_students: Tuple[Student, ...] = field(default_factory=tuple)
    skipped_rows: int = 0
    duplicate_rows: int = 0
    classes_status: Optional[SlotWriteStatus] = None
    students_status: Optional[SlotWriteStatus] = None

    @property
    def classes_added(self) -> int:
        return len(self.new_classes)

    @property
    def students_added(self) -> int:
        return len(self.new_students)

    @property
    def statuses(self) -> Tuple[SlotWriteStatus, ...]:
        return tuple(s for s in (self.classes_status, self.students_status) if s is not None)

    @property
    def saved(self) -> bool:
        """False when a write was skipped or could not reach the local cache."""
        return all(s == SlotWriteStatus.SAVED for s in self.statuses)

    @property
    def discarded(self) -> bool:
        return SlotWriteStatus.SKIPPED_NOT_LOADED in self.statuses

    @property
    def nothing_new(self) -> bool:
        return not self.new_classes and not self.new_students

    @property
    def message(self) -> str:
        if self.discarded:
            return "لم يتم حفظ الاستيراد: بيانات المدرسة ما زالت قيد التحميل، أعد المحاولة"
        if self.nothing_new:
            return "لم يتم العثور على طلاب جدد في الملف"
        if not self.saved:
            return f"تم استيراد {self.students_added} طالب لكن تعذر الحفظ على هذا الجهاز"
        return f"نجاح: تم استيراد {self.students_added} طالب وإنشاء {self.classes_added} فصل."

    def to_dict(self) -> dict:
        return {
            "classesAdded": 0 if self.discarded else self.classes_added,
            "studentsAdded": 0 if self.discarded else self.students_added,
            "skippedRows": self.skipped_rows,
            "duplicateRows": self.duplicate_rows,
            "nothingNew": self.nothing_new,
            "saved": self.saved,
            "classesStatus": self.classes_status.value if self.classes_status else None,
            "studentsStatus": self.students_status.value if self.students_status else None,
            "message": self.message,
        }


def read_workbook_rows(data: bytes) -> List[Optional[List[str]]]:
    """Rows of the first sheet of an .xlsx workbook, blank rows as None."""

    try:
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object, engine="openpyxl")
    except (zipfile.BadZipFile, InvalidFileException, ValueError, KeyError, OSError) as e:
        logger.exception("Cannot read roster workbook")
        raise ImportFileError("خطأ في استيراد الملف: تعذر قراءة ملف Excel") from e
    return [sheet_cells(row) for row in df.itertuples(index=False, name=None)]


class RosterImporter:
    """Folds a roster file into the school's classes and students.

    Invalid rows are skipped, students whose exact name already exists (in the
    school or earlier in the same file) are skipped silently, and each class
    label is created at most once. A file that cannot be decoded or parsed
    raises ImportFileError before anything is written. Importing while the
    school is still loading raises StoreNotReadyError, since the remote copy
    would replace the import once it arrives.
    """

    ENCODINGS = ("utf-8-sig", "cp1256")

    def __init__(self, store: SchoolStore, *, id_factory: Callable[[str], str] = new_id):
        self._store = store
        self._new_id = id_factory

    def import_bytes(self, data: bytes) -> ImportResult:
        if data.startswith(XLSX_MAGIC):
            return self.reconcile(parse_rows(read_workbook_rows(data)))
        if data.startswith(LEGACY_XLS_MAGIC):
            raise ImportFileError("صيغة xls القديمة غير مدعومة، احفظ الملف بصيغة xlsx أو csv")

        for encoding in self.ENCODINGS:
            try:
                text = data.decode(encoding)
                break
            except UnicodeDecodeError:
                continue
        else:
            raise ImportFileError("خطأ في استيراد الملف: ترميز غير مدعوم")
        return self.import_text(text)

    def import_text(self, text: str) -> ImportResult:
        try:
            parsed = parse_roster(text)
        except (csv.Error, ValueError, TypeError) as e:
            logger.exception("Roster parse failed for school %s", self._store.school_id)
            raise ImportFileError("خطأ في استيراد الملف") from e
        return self.reconcile(parsed)

    def reconcile(self, parsed: ParsedRoster) -> ImportResult:
        school_id = self._store.school_id
        if not (self._store.classes.slot.is_loaded and self._store.students.slot.is_loaded):
            logger.warning("Roster import for %s refused: school data still loading", school_id)
            raise StoreNotReadyError("بيانات المدرسة ما زالت قيد التحميل، أعد المحاولة بعد لحظات")

        existing_classes = self._store.classes.list_all()
        existing_students = self._store.students.list_all()

        class_by_name: Dict[str, ClassGroup] = {c.name.strip(): c for c in existing_classes}
        seen_names = {s.name.strip() for s in existing_students}

        new_classes: List[ClassGroup] = []
        new_students: List[Student] = []
        duplicates = 0

        for row in parsed.rows:
            label = class_label(row.grade, row.section)
            target = class_by_name.get(label)
            if target is None:
                target = ClassGroup(
                    id=self._new_id("c_imp"),
                    school_id=school_id,
                    name=label,
                    grade=base_grade(row.grade) or DEFAULT_CLASS_GRADE,
                )
                class_by_name[label] = target
                new_classes.append(target)

            if row.name in seen_names:
                duplicates += 1
                continue
            seen_names.add(row.name)
            new_students.append(
                Student(
                    id=self._new_id("s"),
                    school_id=school_id,
                    name=row.name,
                    class_id=target.id,
                    parent_phone=row.phone,
                )
            )

        classes_status = students_status = None
        if new_classes:
            self._store.classes.append(*new_classes)
            classes_status = self._store.classes.last_status
        if new_students:
            self._store.students.append(*new_students)
            students_status = self._store.students.last_status

        result = ImportResult(
            new_classes=tuple(new_classes),
            new_students=tuple(new_students),
            skipped_rows=len(parsed.rejected_lines),
            duplicate_rows=duplicates,
            classes_status=classes_status,
            students_status=students_status,
        )
        if not result.saved:
            logger.warning("Roster import for %s not fully saved: %s", school_id, [s.value for s in result.statuses])
        logger.info(
            "Roster import for %s: %d classes, %d students, %d skipped, %d duplicates",
            school_id,
            result.classes_added,
            result.students_added,
            result.skipped_rows,
            result.duplicate_rows,
        )
        return result
