"""Logging setup shared by the web app and scripts."""

from __future__ import annotations

import logging
from logging.config import dictConfig

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def configure_logging(level: str = "INFO") -> None:
    """Route all loggers (Flask's app.logger included) to stderr in one format."""
    level = (level or "INFO").upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {', '.join(sorted(VALID_LEVELS))}")

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "default",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
    # werkzeug request lines are noisy below INFO
    logging.getLogger("werkzeug").setLevel(max(logging.INFO, logging.getLevelName(level)))
