"""Create the database schema and, with --seed, the demo accounts."""

from __future__ import annotations

import argparse
import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from timetracker.common.logging_config import configure_logging
from timetracker.database.bootstrap import apply_schema, ensure_demo_users, list_tables
from timetracker.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("timetracker.init_db")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="also insert director/manager/worker demo users")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))
    apply_schema(conn, schema_path=Path(__file__).resolve().parents[1] / "database" / "schema.sql")
    if args.seed:
        ensure_demo_users(conn)

    cfg = conn.config
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        cfg.user, cfg.host, cfg.port, cfg.database, len(list_tables(conn)),
    )


if __name__ == "__main__":
    main()
