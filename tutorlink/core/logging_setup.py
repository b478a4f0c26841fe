# tutorlink/core/logging_setup.py
# Logging setup shared by the API server, Alembic and the API client
#
# Every module logs through a named child of the "tutorlink" logger:
#   logger = logging.getLogger("tutorlink.assignments")

import logging
from logging.config import dictConfig
from typing import Optional

from tutorlink.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the "tutorlink" logger tree.

    Development: DEBUG unless LOG_LEVEL says otherwise.
    Production:  LOG_LEVEL (default INFO).
    Safe to call more than once; later calls replace the handler.
    """
    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "tutorlink": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False,
            },
        },
    })
    logging.getLogger("tutorlink").debug("Logging configured at %s", level.upper())
