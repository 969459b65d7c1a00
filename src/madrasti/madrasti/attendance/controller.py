from __future__ import annotations

from flask import Flask, jsonify, render_template, request

from ..auth.guards import current_school, roles_required
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from .report import absence_report_csv


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(Role.ADMIN)
    school_user = roles_required(Role.ADMIN, Role.TEACHER)

    def _date_arg(ctx) -> str:
        return request.args.get("date") or ctx.attendance.today()

    def _write_report_csv(*, data: bytes, filename: str):
        return app.response_class(
            data,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/school/attendance", methods=["GET"], endpoint="absent_students")
    @school_user
    def absent_students():
        ctx = current_school(container, allow_frozen=True)
        date = _date_arg(ctx)
        rows = ctx.attendance.absent_students(date, request.args.get("classId") or None)
        return jsonify({"success": True, "date": date, "absent": [r.to_dict() for r in rows]})

    @app.route("/api/school/attendance", methods=["POST"], endpoint="mark_attendance")
    @admin_only
    def mark_attendance():
        data = request.get_json(silent=True) or {}
        ctx = current_school(container)
        try:
            status = AttendanceStatus(data.get("status") or "")
        except ValueError:
            raise ValidationError("حالة الحضور غير صالحة")
        record = ctx.attendance.mark(
            student_id=str(data.get("studentId") or ""),
            date=str(data.get("date") or ctx.attendance.today()),
            status=status,
            reported_by="admin",
        )
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/school/attendance/counts", methods=["GET"], endpoint="absence_counts")
    @admin_only
    def absence_counts():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "counts": ctx.attendance.absence_counts()})

    @app.route("/api/school/attendance/archive", methods=["POST"], endpoint="archive_absences")
    @admin_only
    def archive_absences():
        data = request.get_json(silent=True) or {}
        ctx = current_school(container)
        archive = ctx.attendance.archive_daily_absences(str(data.get("date") or ctx.attendance.today()))
        return jsonify({"success": True, "archive": archive.to_dict()}), 201

    @app.route("/api/school/attendance/archives", methods=["GET"], endpoint="list_attendance_archives")
    @admin_only
    def list_attendance_archives():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "archives": [a.to_dict() for a in ctx.attendance.list_archives()]})

    @app.route("/api/school/attendance/archives/<archive_id>", methods=["DELETE"], endpoint="delete_attendance_archive")
    @admin_only
    def delete_attendance_archive(archive_id: str):
        current_school(container).attendance.delete_archive(archive_id)
        return jsonify({"success": True})

    # ===== REPORTS =====

    @app.route("/school/attendance/report", methods=["GET"], endpoint="attendance_report")
    @admin_only
    def attendance_report():
        ctx = current_school(container, allow_frozen=True)
        report = ctx.attendance.absence_report(_date_arg(ctx), request.args.get("classId") or None)
        return render_template(
            "attendance_report.html",
            settings=ctx.settings.get_settings(),
            report=report,
        )

    @app.route("/school/attendance/archives/<archive_id>/print", methods=["GET"], endpoint="print_attendance_archive")
    @admin_only
    def print_attendance_archive(archive_id: str):
        ctx = current_school(container, allow_frozen=True)
        archive = ctx.attendance.get_archive(archive_id)
        return render_template(
            "attendance_report.html",
            settings=ctx.settings.get_settings(),
            report=ctx.attendance.report_from_archive(archive),
        )

    @app.route("/school/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    @admin_only
    def attendance_report_csv():
        ctx = current_school(container, allow_frozen=True)
        report = ctx.attendance.absence_report(_date_arg(ctx), request.args.get("classId") or None)
        return _write_report_csv(data=absence_report_csv(report), filename=report.filename)
