from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import List

from .model import AbsentStudentRow

REPORT_FIELDS = ["date", "class_name", "student_name", "parent_phone"]


@dataclass(frozen=True)
class AbsenceReport:
    date: str
    rows: List[AbsentStudentRow]

    @property
    def total(self) -> int:
        return len(self.rows)

    @property
    def filename(self) -> str:
        return f"absences_{self.date.replace('-', '')}.csv"


def absence_report_csv(report: AbsenceReport) -> bytes:
    """CSV bytes with a BOM so spreadsheet apps detect UTF-8 (Arabic names)."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
    writer.writeheader()
    for row in report.rows:
        writer.writerow(
            {
                "date": report.date,
                "class_name": row.class_name,
                "student_name": row.name,
                "parent_phone": row.parent_phone,
            }
        )
    return out.getvalue().encode("utf-8-sig")
