from __future__ import annotations

import csv
import io

TEMPLATE_FILENAME = "madrasti_students_template.csv"

TEMPLATE_HEADER = ("اسم الطالب", "جوال ولي الأمر", "الصف", "الفصل")
TEMPLATE_ROWS = (
    ("محمد عبدالله", "0500000000", "الصف الأول", "1"),
    ("خالد سعد", "0500000001", "الصف الثاني", "2"),
)


def template_csv() -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(TEMPLATE_HEADER)
    writer.writerows(TEMPLATE_ROWS)
    return out.getvalue()


def template_csv_bytes() -> bytes:
    # BOM so spreadsheet apps open the Arabic text as UTF-8.
    return template_csv().encode("utf-8-sig")
