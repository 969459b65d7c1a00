from __future__ import annotations

from flask import Flask, jsonify, render_template, request

from ..auth.guards import current_school, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import SubscriptionError


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(Role.ADMIN)
    school_user = roles_required(Role.ADMIN, Role.TEACHER)

    def _render_plans(ctx, views, *, archive=None):
        return render_template(
            "weekly_plan.html",
            settings=ctx.settings.get_settings(),
            week=archive.week_info if archive else ctx.settings.get_week(),
            plans=views,
            archive=archive,
        )

    def _open_public_school(school_id: str):
        school = container.school_service.get_school(school_id)
        if container.school_service.is_frozen(school):
            raise SubscriptionError("الخطة غير متاحة حالياً")
        return container.open_school(school.id)

    @app.route("/api/school/plans", methods=["GET"], endpoint="list_plans")
    @school_user
    def list_plans():
        ctx = current_school(container, allow_frozen=True)
        entries = ctx.plans.entries_for_class(request.args.get("classId", ""))
        return jsonify({"success": True, "entries": [e.to_dict() for e in entries]})

    @app.route("/api/school/plans", methods=["PUT"], endpoint="save_plan_entry")
    @admin_only
    def save_plan_entry():
        data = request.get_json(silent=True) or {}
        entry = current_school(container).plans.save_entry(
            class_id=str(data.get("classId") or ""),
            day_index=data.get("dayIndex"),
            period=data.get("period"),
            lesson_topic=str(data.get("lessonTopic") or ""),
            homework=str(data.get("homework") or ""),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "entry": entry.to_dict()})

    @app.route("/api/school/plans", methods=["DELETE"], endpoint="clear_plans")
    @admin_only
    def clear_plans():
        current_school(container).plans.clear_plans()
        return jsonify({"success": True})

    @app.route("/api/school/plans/archive", methods=["POST"], endpoint="archive_plan")
    @admin_only
    def archive_plan():
        data = request.get_json(silent=True) or {}
        archive = current_school(container).plans.archive_class_plan(str(data.get("classId") or ""))
        return jsonify({"success": True, "archive": archive.to_dict()}), 201

    @app.route("/api/school/archives", methods=["GET"], endpoint="list_plan_archives")
    @admin_only
    def list_plan_archives():
        ctx = current_school(container, allow_frozen=True)
        return jsonify({"success": True, "archives": [a.to_dict() for a in ctx.plans.list_archives()]})

    @app.route("/api/school/archives/<archive_id>", methods=["DELETE"], endpoint="delete_plan_archive")
    @admin_only
    def delete_plan_archive(archive_id: str):
        current_school(container).plans.delete_archive(archive_id)
        return jsonify({"success": True})

    # ===== PRINTABLE VIEWS =====

    @app.route("/school/plans/<class_id>/print", methods=["GET"], endpoint="print_plan")
    @school_user
    def print_plan(class_id: str):
        ctx = current_school(container, allow_frozen=True)
        return _render_plans(ctx, [ctx.plans.build_weekly_grid(class_id)])

    @app.route("/school/archives/<archive_id>/print", methods=["GET"], endpoint="print_plan_archive")
    @admin_only
    def print_plan_archive(archive_id: str):
        ctx = current_school(container, allow_frozen=True)
        archive = ctx.plans.get_archive(archive_id)
        return _render_plans(ctx, [ctx.plans.archive_view(archive_id)], archive=archive)

    @app.route("/schools/<school_id>/classes/<class_id>/plan", methods=["GET"], endpoint="public_class_plan")
    def public_class_plan(school_id: str, class_id: str):
        """Shareable plan page for parents; no login."""

        ctx = _open_public_school(school_id)
        return _render_plans(ctx, [ctx.plans.build_weekly_grid(class_id)])

    @app.route("/schools/<school_id>/plans", methods=["GET"], endpoint="public_school_portal")
    def public_school_portal(school_id: str):
        """Public list of the school's classes, filtered by ``?search=`` on name or grade."""

        ctx = _open_public_school(school_id)
        search = request.args.get("search", "").strip()
        return render_template(
            "school_portal.html",
            settings=ctx.settings.get_settings(),
            week=ctx.settings.get_week(),
            school_id=school_id,
            search=search,
            classes=ctx.classes.search(search),
        )

    @app.route("/schools/<school_id>/plans/print", methods=["GET"], endpoint="public_print_all_plans")
    def public_print_all_plans(school_id: str):
        ctx = _open_public_school(school_id)
        classes = ctx.classes.search(request.args.get("search", ""))
        views = [ctx.plans.build_weekly_grid(c.id, class_name=c.name) for c in classes]
        return _render_plans(ctx, views)
