"""Parsing of loosely structured student roster exports (Noor and friends).

The delimiter is chosen per line, the header row is found by looking for a
"student name" column, and the other columns are matched by substring
synonyms. Files without a recognizable header fall back to the fixed order
name, phone, grade, class.
"""
from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

HEADER_SCAN_LINES = 30

NAME_CONTAINS = ("اسم الطالب", "student name")
NAME_EXACT = ("الاسم", "اسم", "name")
PHONE_SYNONYMS = ("جوال", "رقم ولي الأمر", "هاتف", "phone", "mobile")
# Only when no explicit phone column exists, and never a guardian *name* column.
PHONE_FALLBACK = ("ولي الأمر",)
GUARDIAN_NAME_MARK = "اسم"
SECTION_SYNONYMS = ("الفصل", "الشعبة", "section", "class")
GRADE_SYNONYMS = ("الصف", "المرحلة", "grade")

_LETTER_RE = re.compile(r"[A-Za-z\u0621-\u064A\u066E-\u06D3\u06FA-\u06FF]")
_STRIP_CHARS = " \t\r\n\"'\ufeff\u200e\u200f"


@dataclass(frozen=True)
class ColumnMap:
    name: int
    phone: Optional[int] = None
    grade: Optional[int] = None
    section: Optional[int] = None


DEFAULT_COLUMNS = ColumnMap(name=0, phone=1, grade=2, section=3)


@dataclass(frozen=True)
class RosterRow:
    line_no: int
    name: str
    phone: str = ""
    grade: str = ""
    section: str = ""


@dataclass(frozen=True)
class ParsedRoster:
    columns: ColumnMap
    header_line: Optional[int]
    header_name: str = ""
    rows: Tuple[RosterRow, ...] = field(default_factory=tuple)
    rejected_lines: Tuple[int, ...] = field(default_factory=tuple)


def detect_delimiter(line: str) -> str:
    return ";" if ";" in line else ","


def clean_cell(value: str) -> str:
    return (value or "").strip(_STRIP_CHARS).strip()


def split_line(line: str) -> List[str]:
    reader = csv.reader([line], delimiter=detect_delimiter(line), quotechar='"')
    return [clean_cell(cell) for cell in next(reader, [])]


def _is_name_header(cell: str) -> bool:
    low = cell.lower()
    return any(s in low for s in NAME_CONTAINS) or low in NAME_EXACT


def _find_column(cells: Sequence[str], synonyms: Sequence[str], taken: set, *, exclude: str = "") -> Optional[int]:
    for idx, cell in enumerate(cells):
        if idx in taken:
            continue
        low = cell.lower()
        if exclude and exclude in low:
            continue
        if any(s in low for s in synonyms):
            taken.add(idx)
            return idx
    return None


def detect_columns(cells: Sequence[str]) -> Optional[ColumnMap]:
    """Column roles of a header row, or None if it has no student name column."""

    name_idx = next((i for i, cell in enumerate(cells) if _is_name_header(cell)), None)
    if name_idx is None:
        return None

    taken = {name_idx}
    phone = _find_column(cells, PHONE_SYNONYMS, taken)
    if phone is None:
        phone = _find_column(cells, PHONE_FALLBACK, taken, exclude=GUARDIAN_NAME_MARK)
    section = _find_column(cells, SECTION_SYNONYMS, taken)
    grade = _find_column(cells, GRADE_SYNONYMS, taken)
    return ColumnMap(name=name_idx, phone=phone, grade=grade, section=section)


def is_valid_name(name: str, header_name: str = "") -> bool:
    if not name or len(name) < 2:
        return False
    if not _LETTER_RE.search(name):
        return False
    if header_name and name == header_name:
        return False
    return True


def normalize_phone(phone: str) -> str:
    phone = (phone or "").strip().replace(" ", "")
    if phone.startswith("+"):
        phone = phone[1:]
    if phone.startswith("966"):
        phone = "0" + phone[3:]
    return phone


def _cell(cells: Sequence[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(cells):
        return ""
    return cells[idx]


def parse_rows(rows: Sequence[Optional[Sequence[str]]]) -> ParsedRoster:
    """Parse already split rows. ``None`` marks a blank line; line numbers are 1-based positions."""

    columns = DEFAULT_COLUMNS
    header_line: Optional[int] = None
    header_name = ""
    for i, cells in enumerate(rows[:HEADER_SCAN_LINES]):
        if cells is None:
            continue
        detected = detect_columns(cells)
        if detected is not None:
            columns = detected
            header_line = i
            header_name = cells[detected.name]
            break

    parsed: List[RosterRow] = []
    rejected: List[int] = []
    start = 0 if header_line is None else header_line + 1
    for i in range(start, len(rows)):
        cells = rows[i]
        if cells is None:
            continue
        if len(cells) <= columns.name:
            rejected.append(i + 1)
            continue

        name = " ".join(cells[columns.name].split())
        if not is_valid_name(name, header_name):
            rejected.append(i + 1)
            continue

        parsed.append(
            RosterRow(
                line_no=i + 1,
                name=name,
                phone=normalize_phone(_cell(cells, columns.phone)),
                grade=_cell(cells, columns.grade),
                section=_cell(cells, columns.section),
            )
        )

    return ParsedRoster(
        columns=columns,
        header_line=header_line,
        header_name=header_name,
        rows=tuple(parsed),
        rejected_lines=tuple(rejected),
    )


def parse_roster(text: str) -> ParsedRoster:
    return parse_rows([split_line(line) if line.strip() else None for line in text.splitlines()])


def sheet_cells(values: Sequence[object]) -> Optional[List[str]]:
    """Cells of one spreadsheet row as roster strings, or None for an empty row."""

    cells = [clean_cell(_sheet_value(v)) for v in values]
    return cells if any(cells) else None


def _sheet_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN from empty cells
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)
