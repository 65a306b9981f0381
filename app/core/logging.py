# app/core/logging.py

import logging.config
import os
import sys

from app.core.config import settings

ROTATION_BYTES = 5 * 1024 * 1024


def build_logging_config(log_dir: str, level: str) -> dict:
    """
    Build the dictConfig for the API.

    Three files are written under ``log_dir``:
    - app.log: everything at INFO and above
    - audit.log: one line per versioned mutation (update, rollback, delete)
    - security.log: failed logins, rejected tokens, forbidden access
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "[%(asctime)s] %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "file": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(process)d | %(threadName)s | "
                    "%(name)s | %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "audit": {
                "format": "%(asctime)s | AUDIT | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "security": {
                "format": (
                    "%(asctime)s | SECURITY | %(levelname)s | %(name)s | %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "console",
                "level": "DEBUG",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "app.log"),
                "formatter": "file",
                "level": "INFO",
                "maxBytes": ROTATION_BYTES,
                "backupCount": 5,
                "encoding": "utf-8",
            },
            "audit": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "audit.log"),
                "formatter": "audit",
                "level": "INFO",
                "maxBytes": ROTATION_BYTES,
                "backupCount": 10,
                "encoding": "utf-8",
            },
            "security": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "security.log"),
                "formatter": "security",
                "level": "WARNING",
                "maxBytes": ROTATION_BYTES,
                "backupCount": 3,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console", "file"],
                "level": level,
                "propagate": False,
            },
            # Audit trail of history writes; kept apart from app.log
            "audit": {
                "handlers": ["audit"],
                "level": "INFO",
                "propagate": False,
            },
            "app.security": {
                "handlers": ["file", "security"],
                "level": "WARNING",
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
            },
        },
    }


def init_logging(log_dir: str | None = None, level: str | None = None):
    """
    Create the log directory and apply the logging configuration.
    """
    log_dir = log_dir or settings.LOG_DIR
    level = (level or settings.LOG_LEVEL).upper()
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, level))
    logger = logging.getLogger(__name__)
    logger.info("Logging initialized (dir=%s, level=%s)", log_dir, level)
