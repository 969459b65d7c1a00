from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import current_school, current_teacher_id, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ImportFileError
from ..roster.template import TEMPLATE_FILENAME, template_csv_bytes


def _json() -> dict:
    return request.get_json(silent=True) or {}


def _slot_args(data: dict) -> dict:
    return {
        "class_id": str(data.get("classId") or ""),
        "day_index": data.get("dayIndex"),
        "period": data.get("period"),
    }


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(Role.ADMIN)
    school_user = roles_required(Role.ADMIN, Role.TEACHER)
    teacher_only = roles_required(Role.TEACHER)

    # ===== SETTINGS / WEEK =====

    @app.route("/api/school/settings", methods=["GET"], endpoint="school_settings")
    @school_user
    def school_settings():
        ctx = current_school(container, allow_frozen=True)
        return jsonify(
            {
                "success": True,
                "settings": ctx.settings.get_settings().to_dict(),
                "week": ctx.settings.get_week().to_dict(),
                "loaded": ctx.store.is_loaded,
            }
        )

    @app.route("/api/school/settings", methods=["PUT"], endpoint="update_school_settings")
    @admin_only
    def update_school_settings():
        ctx = current_school(container)
        settings = ctx.settings.update_settings(_json())
        return jsonify({"success": True, "settings": settings.to_dict()})

    @app.route("/api/school/week", methods=["PUT"], endpoint="update_week")
    @admin_only
    def update_week():
        ctx = current_school(container)
        week = ctx.settings.update_week(_json())
        return jsonify({"success": True, "week": week.to_dict()})

    # ===== SUBJECTS / CLASSES =====

    @app.route("/api/school/subjects", methods=["GET"], endpoint="list_subjects")
    @school_user
    def list_subjects():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "subjects": [s.to_dict() for s in ctx.subjects.list_all()]})

    @app.route("/api/school/subjects", methods=["POST"], endpoint="add_subject")
    @admin_only
    def add_subject():
        data = _json()
        subject = current_school(container).subjects.add(name=data.get("name", ""), color=data.get("color", ""))
        return jsonify({"success": True, "subject": subject.to_dict()}), 201

    @app.route("/api/school/subjects/<subject_id>", methods=["DELETE"], endpoint="delete_subject")
    @admin_only
    def delete_subject(subject_id: str):
        current_school(container).subjects.delete(subject_id)
        return jsonify({"success": True})

    @app.route("/api/school/classes", methods=["GET"], endpoint="list_classes")
    @school_user
    def list_classes():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "classes": [c.to_dict() for c in ctx.classes.list_all()]})

    @app.route("/api/school/classes", methods=["POST"], endpoint="add_class")
    @admin_only
    def add_class():
        data = _json()
        group = current_school(container).classes.add(name=data.get("name", ""), grade=data.get("grade", ""))
        return jsonify({"success": True, "class": group.to_dict()}), 201

    @app.route("/api/school/classes/<class_id>", methods=["DELETE"], endpoint="delete_class")
    @admin_only
    def delete_class(class_id: str):
        current_school(container).classes.delete(class_id)
        return jsonify({"success": True})

    # ===== STUDENTS =====

    @app.route("/api/school/students", methods=["GET"], endpoint="list_students")
    @school_user
    def list_students():
        ctx = current_school(container, allow_frozen=True)
        students = ctx.students.search(request.args.get("q", ""), class_id=request.args.get("classId") or None)
        return jsonify({"success": True, "students": [s.to_dict() for s in students]})

    @app.route("/api/school/students", methods=["POST"], endpoint="add_student")
    @admin_only
    def add_student():
        data = _json()
        student = current_school(container).students.add(
            name=data.get("name", ""),
            class_id=data.get("classId", ""),
            parent_phone=data.get("parentPhone", ""),
        )
        return jsonify({"success": True, "student": student.to_dict()}), 201

    @app.route("/api/school/students/<student_id>", methods=["PUT"], endpoint="update_student")
    @admin_only
    def update_student(student_id: str):
        data = _json()
        student = current_school(container).students.update(
            student_id,
            name=data.get("name"),
            class_id=data.get("classId"),
            parent_phone=data.get("parentPhone"),
        )
        return jsonify({"success": True, "student": student.to_dict()})

    @app.route("/api/school/students/<student_id>", methods=["DELETE"], endpoint="delete_student")
    @admin_only
    def delete_student(student_id: str):
        current_school(container).students.delete(student_id)
        return jsonify({"success": True})

    @app.route("/api/school/students", methods=["DELETE"], endpoint="clear_students")
    @admin_only
    def clear_students():
        removed = current_school(container).students.clear_all()
        return jsonify({"success": True, "removed": removed})

    @app.route("/api/school/students/import", methods=["POST"], endpoint="import_roster")
    @admin_only
    def import_roster():
        ctx = current_school(container)
        upload = request.files.get("file")
        if upload is None:
            raise ImportFileError("يرجى اختيار ملف")
        result = ctx.roster.import_bytes(upload.read())
        return jsonify({"success": result.saved, **result.to_dict()})

    @app.route("/api/school/students/template", methods=["GET"], endpoint="roster_template")
    def roster_template():
        return app.response_class(
            template_csv_bytes(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={TEMPLATE_FILENAME}"},
        )

    # ===== TEACHERS =====

    @app.route("/api/school/teachers", methods=["GET"], endpoint="list_teachers")
    @admin_only
    def list_teachers():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "teachers": [t.to_public_dict() for t in ctx.teachers.list_all()]})

    @app.route("/api/school/teachers", methods=["POST"], endpoint="add_teacher")
    @admin_only
    def add_teacher():
        data = _json()
        teacher = current_school(container).teachers.create(
            name=data.get("name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
        )
        return jsonify({"success": True, "teacher": teacher.to_public_dict()}), 201

    @app.route("/api/school/teachers/<teacher_id>", methods=["PUT"], endpoint="update_teacher")
    @admin_only
    def update_teacher(teacher_id: str):
        data = _json()
        teacher = current_school(container).teachers.update(
            teacher_id,
            name=data.get("name"),
            username=data.get("username"),
            password=data.get("password"),
        )
        return jsonify({"success": True, "teacher": teacher.to_public_dict()})

    @app.route("/api/school/teachers/<teacher_id>", methods=["DELETE"], endpoint="delete_teacher")
    @admin_only
    def delete_teacher(teacher_id: str):
        current_school(container).teachers.delete(teacher_id)
        return jsonify({"success": True})

    # ===== SCHEDULE =====

    @app.route("/api/school/schedule", methods=["GET"], endpoint="class_schedule")
    @school_user
    def class_schedule():
        ctx = current_school(container, allow_frozen=True)
        slots = ctx.schedule.for_class(request.args.get("classId", ""))
        return jsonify({"success": True, "schedule": [s.to_dict() for s in slots]})

    @app.route("/api/school/schedule", methods=["PUT"], endpoint="assign_schedule")
    @admin_only
    def assign_schedule():
        data = _json()
        slot = current_school(container).schedule.assign(
            **_slot_args(data),
            subject_id=str(data.get("subjectId") or ""),
            teacher_id=str(data.get("teacherId") or ""),
        )
        return jsonify({"success": True, "slot": slot.to_dict()})

    @app.route("/api/school/schedule", methods=["DELETE"], endpoint="remove_schedule")
    @admin_only
    def remove_schedule():
        current_school(container).schedule.remove(**_slot_args(_json()))
        return jsonify({"success": True})

    # ===== MESSAGES (ADMIN) =====

    @app.route("/api/school/messages", methods=["GET"], endpoint="admin_inbox")
    @admin_only
    def admin_inbox():
        ctx = current_school(container, allow_frozen=True)
        teacher_id = request.args.get("teacherId")
        msgs = ctx.messages.conversation(teacher_id) if teacher_id else ctx.messages.admin_inbox()
        return jsonify(
            {
                "success": True,
                "messages": [m.to_dict() for m in msgs],
                "unread": ctx.messages.unread_count("admin"),
            }
        )

    @app.route("/api/school/messages", methods=["POST"], endpoint="admin_send_message")
    @admin_only
    def admin_send_message():
        data = _json()
        msg = current_school(container).messages.send_from_admin(
            receiver_id=str(data.get("receiverId") or ""),
            content=str(data.get("content") or ""),
        )
        return jsonify({"success": True, "message": msg.to_dict()}), 201

    @app.route("/api/school/messages/read", methods=["POST"], endpoint="admin_mark_read")
    @admin_only
    def admin_mark_read():
        data = _json()
        changed = current_school(container, allow_frozen=True).messages.mark_read(
            "admin", sender_id=str(data.get("teacherId") or "")
        )
        return jsonify({"success": True, "updated": changed})

    # ===== TEACHER PORTAL =====

    @app.route("/api/teacher/schedule", methods=["GET"], endpoint="teacher_schedule")
    @teacher_only
    def teacher_schedule():
        ctx = current_school(container, allow_frozen=True)
        slots = ctx.schedule.for_teacher(current_teacher_id())
        return jsonify({"success": True, "schedule": [s.to_dict() for s in slots]})

    @app.route("/api/teacher/plans", methods=["PUT"], endpoint="teacher_update_plan")
    @teacher_only
    def teacher_update_plan():
        data = _json()
        ctx = current_school(container)
        args = _slot_args(data)
        slot = ctx.schedule.get(**args)
        if slot is None or slot.teacher_id != current_teacher_id():
            return jsonify({"success": False, "message": "هذه الحصة ليست ضمن جدولك"}), 403
        entry = ctx.plans.update_field(
            **args,
            field=str(data.get("field") or ""),
            value=str(data.get("value") or ""),
        )
        return jsonify({"success": True, "entry": entry.to_dict()})

    @app.route("/api/teacher/attendance/toggle", methods=["POST"], endpoint="teacher_toggle_absence")
    @teacher_only
    def teacher_toggle_absence():
        data = _json()
        ctx = current_school(container)
        record = ctx.attendance.toggle_absence(
            student_id=str(data.get("studentId") or ""),
            date=str(data.get("date") or ctx.attendance.today()),
            reported_by=current_teacher_id(),
        )
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/teacher/messages", methods=["GET"], endpoint="teacher_inbox")
    @teacher_only
    def teacher_inbox():
        ctx = current_school(container, allow_frozen=True)
        teacher_id = current_teacher_id()
        return jsonify(
            {
                "success": True,
                "messages": [m.to_dict() for m in ctx.messages.teacher_inbox(teacher_id)],
                "unread": ctx.messages.unread_count(teacher_id),
            }
        )

    @app.route("/api/teacher/messages", methods=["POST"], endpoint="teacher_send_message")
    @teacher_only
    def teacher_send_message():
        data = _json()
        msg = current_school(container).messages.send_to_admin(
            teacher_id=current_teacher_id(),
            content=str(data.get("content") or ""),
        )
        return jsonify({"success": True, "message": msg.to_dict()}), 201

    @app.route("/api/teacher/messages/read", methods=["POST"], endpoint="teacher_mark_read")
    @teacher_only
    def teacher_mark_read():
        ctx = current_school(container, allow_frozen=True)
        changed = ctx.messages.mark_read(current_teacher_id())
        return jsonify({"success": True, "updated": changed})
