from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StoreNotReadyError,
    SubscriptionError,
)
from .database.bootstrap import apply_schema, list_tables
from .plans.controller import register as register_plans
from .school.controller import register as register_school
from .tenants.controller import register as register_tenants

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (SubscriptionError, 403),
    (NotFoundError, 404),
    (StoreNotReadyError, 503),
    (DomainError, 400),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next(code for cls, code in STATUS_BY_ERROR if isinstance(e, cls))
        return jsonify({"success": False, "message": str(e)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error")
        message = f"خطأ في النظام: {e}" if app.config.get("DEBUG") else "خطأ في النظام"
        return jsonify({"success": False, "message": message}), 500


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    cloud_enabled = bool(getattr(settings, "CLOUD_ENABLED", False))
    logger.info("settings=%s cloud=%s", settings_module, cloud_enabled)

    if container is None:
        container = build_container(settings)

    if cloud_enabled and container.conn is not None and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(container.conn, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    container.registry.refresh_from_remote()

    _register_error_handlers(app)
    register_auth(app, container)
    register_tenants(app, container)
    register_school(app, container)
    register_plans(app, container)
    register_attendance(app, container)

    app.extensions["madrasti"] = container
    if not app.config["TESTING"]:
        atexit.register(container.stores.close_all)

    return app
