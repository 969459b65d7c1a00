from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..container import Container
from .guards import current_user, store_session

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/system/login", methods=["POST"], endpoint="system_login")
    def system_login():
        data = request.get_json(silent=True) or {}
        user = container.auth_service.authenticate_system(data.get("username", ""), data.get("password", ""))
        store_session(user)
        logger.info("System operator logged in")
        return jsonify({"success": True, "role": user.role.value, "name": user.name})

    @app.route("/api/schools/enter", methods=["POST"], endpoint="enter_school")
    def enter_school():
        """First step of the school login: resolve the school code."""

        data = request.get_json(silent=True) or {}
        school = container.school_service.enter_school(data.get("code", ""))
        return jsonify(
            {
                "success": True,
                "school": school.to_public_dict(),
                "frozen": container.school_service.is_frozen(school),
            }
        )

    @app.route("/api/schools/<school_id>/login", methods=["POST"], endpoint="school_login")
    def school_login(school_id: str):
        data = request.get_json(silent=True) or {}
        school = container.school_service.enter_school(school_id)
        ctx = container.open_school(school.id)
        user = container.auth_service.authenticate_school_user(
            school,
            ctx.store,
            data.get("username", ""),
            data.get("password", ""),
        )
        store_session(user)
        return jsonify(
            {
                "success": True,
                "role": user.role.value,
                "name": user.name,
                "teacherId": user.teacher_id,
                "frozen": container.school_service.is_frozen(school),
            }
        )

    @app.route("/api/me", methods=["GET"], endpoint="me")
    def me():
        user = current_user()
        if user is None:
            return jsonify({"success": True, "user": None})
        return jsonify(
            {
                "success": True,
                "user": {
                    "role": user.role.value,
                    "name": user.name,
                    "schoolId": user.school_id,
                    "teacherId": user.teacher_id,
                },
            }
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})
