from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .documents.controller import register as register_documents
from .invoices.controller import register as register_invoices
from .projects.controller import register as register_projects
from .settings.controller import register as register_settings
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

log = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory. A prebuilt ``container`` skips all database setup."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            log.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            if ensure_admin_user(db_config):
                log.info("Seeded default admin user")

        container = build_container(
            db_config=db_config,
            work_policy_defaults=getattr(settings, "WORK_POLICY_DEFAULTS", None),
        )

    app.extensions["labour_portal"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_settings(app, container)
    register_projects(app, container)
    register_timesheets(app, container)
    register_invoices(app, container)
    register_documents(app, container)

    return app
