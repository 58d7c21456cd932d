"""
Logging setup shared by the preview API, the console command and the client.

Log lines go to stderr so the console's tables and ``--json`` output on
stdout stay clean.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Optional

PACKAGE_LOGGER = "survey_import"

# Chatty at DEBUG: urllib3 logs every preview request, multipart every part
QUIET_LOGGERS = ("urllib3", "multipart", "python_multipart")

_configured_level: Optional[str] = None


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root and ``survey_import`` loggers.

    Calling again with the same level is a no-op; calling with a different
    explicit level (e.g. the console's ``--log-level``) reapplies the config.

    Args:
        level: Log level name such as "DEBUG" or "INFO" (default INFO)
    """
    global _configured_level

    log_level = (level or "INFO").upper()
    if _configured_level is not None and (level is None or log_level == _configured_level):
        return

    third_party_level = log_level if log_level == "DEBUG" else "WARNING"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                name: {"level": third_party_level} for name in QUIET_LOGGERS
            },
            "root": {
                "handlers": ["stderr"],
                "level": log_level,
            },
        }
    )

    # Package records still propagate to the root handler
    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level)

    _configured_level = log_level
