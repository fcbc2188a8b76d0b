"""
Logging setup shared by the API and the uvicorn server.

``setup_logging`` installs one console handler and, when ``LOG_FILE``
is set, a size‑rotated file handler on the root logger.  Uvicorn's own
loggers are stripped of their handlers and propagate to the root, so
access lines, server errors and application messages share one format
and one destination.  ``run.py`` starts uvicorn with ``log_config=None``
so the server does not install a configuration of its own.

Services obtain their loggers with ``logging.getLogger(__name__)`` and
never log passwords or tokens.
"""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_configured = False


def build_logging_config(
    level: str = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Dict[str, Any]:
    """Return the ``logging.config.dictConfig`` mapping for the service.

    Unknown level names fall back to ``INFO``.  ``logfile`` is resolved
    against the current working directory.
    """
    level = level.upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
    }
    if logfile:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(Path(logfile).resolve()),
            "maxBytes": max_bytes,
            "backupCount": backup_count,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT}},
        "handlers": handlers,
        "loggers": {
            name: {"handlers": [], "propagate": True} for name in SERVER_LOGGERS
        },
        "root": {"level": level, "handlers": list(handlers)},
    }


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    force: bool = False,
) -> None:
    """Configure logging once per process.

    Later calls are ignored unless ``force`` is true, so building a
    second app (or importing ``main`` from ``run.py``) does not stack
    handlers.
    """
    global _configured
    if _configured and not force:
        return
    logging.config.dictConfig(build_logging_config(level, logfile, max_bytes, backup_count))
    _configured = True
