from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.web import error_response
from .core.exceptions import AuthorizationError, BalanceLimitError, DomainError, NotFoundError, ValidationError
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .closing.controller import register as register_closing
from .days.controller import register as register_days
from .leaverequests.controller import register as register_leave_requests
from .payouts.controller import register as register_payouts
from .timecalc.controller import register as register_timecalc

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return error_response(str(e), 400)

    @app.errorhandler(BalanceLimitError)
    def handle_balance_limit(e: BalanceLimitError):
        logger.warning("Rejected by minus-hours limit: %s", e)
        return error_response(str(e), 409)

    @app.errorhandler(AuthorizationError)
    def handle_authorization_error(e: AuthorizationError):
        return error_response(str(e), 403)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return error_response(str(e), 404)

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_response(str(e), 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return error_response("Interner Fehler. Bitte später erneut versuchen.", 500)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(db_config=db_config)

    _register_error_handlers(app)
    register_timecalc(app, container)
    register_days(app, container)
    register_payouts(app, container)
    register_leave_requests(app, container)
    register_closing(app, container)

    return app
