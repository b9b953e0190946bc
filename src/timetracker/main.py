from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_config import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .api.controller import register as register_api
from .entries.controller import register as register_entries
from .projects.controller import register as register_projects
from .reports.controller import register as register_reports
from .users.controller import register as register_users

ROOT_DIR = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    A ready container (e.g. in-memory repositories in tests) skips all
    database setup.
    """
    load_dotenv(override=False)
    app = Flask(__name__, template_folder=str(ROOT_DIR / "templates"), static_folder=str(ROOT_DIR / "static"))

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["TOKEN_MAX_AGE_SECONDS"] = int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", 12 * 3600))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        container = build_container(
            db_config=db_config,
            monthly_hours=int(getattr(settings, "MONTHLY_HOURS", 160)),
            pln_to_uah_rate=Decimal(str(getattr(settings, "PLN_TO_UAH_RATE", "10.5"))),
        )
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(container.conn, schema_path=ROOT_DIR / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(container.conn)

    app.extensions["timetracker"] = container

    register_users(app, container)
    register_entries(app, container)
    register_projects(app, container)
    register_reports(app, container)
    register_api(app, container)

    return app
