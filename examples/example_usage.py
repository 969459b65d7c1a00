"""Example: drive the service layer without Flask.

Registers a school, imports a small roster and prints the absence report.
"""

import importlib

from config import get_settings_module

from src.madrasti.madrasti.container import build_container
from src.madrasti.madrasti.core.enums import AttendanceStatus

ROSTER = """اسم الطالب,جوال ولي الأمر,الصف,الفصل
محمد عبدالله,966500000000,الصف الأول المتوسط,1
خالد سعد,0500000001,الصف الأول المتوسط,1
"""


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    school = container.school_service.register_school(name="مدرسة المثال", admin_password="secret123")
    ctx = container.open_school(school.id)

    result = ctx.roster.import_text(ROSTER)
    print(result.message)

    first = ctx.students.list_all()[0]
    today = ctx.attendance.today()
    ctx.attendance.mark(student_id=first.id, date=today, status=AttendanceStatus.ABSENT)
    print(ctx.attendance.export_csv(today).decode("utf-8-sig"))

    container.stores.close_all()


if __name__ == "__main__":
    main()
