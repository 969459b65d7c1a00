from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import roles_required
from ..common.datetime_utils import from_iso
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import PricingConfig, SchoolMetadata


def _operator_view(school: SchoolMetadata) -> dict:
    d = school.to_dict()
    d.pop("adminPasswordHash")
    return d


def register(app: Flask, container: Container) -> None:
    service = container.school_service

    @app.route("/api/schools/register", methods=["POST"], endpoint="register_school")
    def register_school():
        data = request.get_json(silent=True) or {}
        school = service.register_school(
            name=data.get("name", ""),
            email=data.get("email", ""),
            manager_phone=data.get("managerPhone", ""),
            admin_username=data.get("adminUsername", ""),
            admin_password=data.get("adminPassword", ""),
        )
        return jsonify({"success": True, "school": school.to_public_dict()}), 201

    @app.route("/api/pricing", methods=["GET"], endpoint="pricing")
    def pricing():
        return jsonify({"success": True, "pricing": service.get_pricing().to_dict()})

    @app.route("/api/schools/<school_id>/renewal-request", methods=["POST"], endpoint="request_renewal")
    def request_renewal(school_id: str):
        sent = service.request_renewal(school_id)
        return jsonify({"success": sent})

    @app.route("/api/schools/<school_id>/upgrade", methods=["POST"], endpoint="upgrade_subscription")
    def upgrade_subscription(school_id: str):
        data = request.get_json(silent=True) or {}
        ok = service.upgrade_subscription(school_id, data.get("plan", ""), data.get("code", ""))
        if not ok:
            return jsonify({"success": False, "message": "كود التفعيل غير صحيح"}), 400
        return jsonify({"success": True, "school": service.get_school(school_id).to_public_dict()})

    # ===== SYSTEM OPERATOR =====

    @app.route("/api/system/schools", methods=["GET"], endpoint="system_schools")
    @roles_required(Role.SYSTEM)
    def system_schools():
        schools = service.list_schools(request.args.get("search", ""))
        return jsonify({"success": True, "schools": [_operator_view(s) for s in schools]})

    @app.route("/api/system/schools/<school_id>/toggle", methods=["POST"], endpoint="system_toggle_school")
    @roles_required(Role.SYSTEM)
    def system_toggle_school(school_id: str):
        school = service.toggle_status(school_id)
        return jsonify({"success": True, "school": _operator_view(school)})

    @app.route("/api/system/schools/<school_id>/extend", methods=["POST"], endpoint="system_extend_school")
    @roles_required(Role.SYSTEM)
    def system_extend_school(school_id: str):
        data = request.get_json(silent=True) or {}
        try:
            end = from_iso(str(data.get("subscriptionEnd") or ""))
        except ValueError:
            raise ValidationError("تاريخ انتهاء الاشتراك غير صالح")
        school = service.extend_subscription(school_id, end)
        return jsonify({"success": True, "school": _operator_view(school)})

    @app.route("/api/system/schools/<school_id>", methods=["DELETE"], endpoint="system_delete_school")
    @roles_required(Role.SYSTEM)
    def system_delete_school(school_id: str):
        service.delete_school(school_id)
        container.stores.evict(school_id)
        return jsonify({"success": True})

    @app.route("/api/system/pricing", methods=["PUT"], endpoint="system_save_pricing")
    @roles_required(Role.SYSTEM)
    def system_save_pricing():
        data = request.get_json(silent=True) or {}
        try:
            pricing = PricingConfig.from_dict(data)
        except (TypeError, ValueError):
            raise ValidationError("السعر غير صالح")
        service.save_pricing(pricing)
        return jsonify({"success": True, "pricing": pricing.to_dict()})
