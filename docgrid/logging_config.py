from __future__ import annotations

"""Central logging configuration for docgrid.

The library itself only creates module loggers; applications (and the test
suite) call :func:`setup_logging` once at start-up to route them.
"""

import copy
import logging
import logging.config
import os
from typing import List

from docgrid.config import ConfigManager

__all__ = ["setup_logging", "TABLE_LOGGERS"]

TABLE_LOGGERS = (
    "docgrid.core.tables",
    "docgrid.core.model.table_map",
    "docgrid.core.state.selection",
)

_TRUTHY = {"1", "true", "yes", "on"}


def setup_logging() -> None:
    """Configure logging from the ``logging.yml`` config section."""
    log_dir = os.environ.get("DOCGRID_LOG_DIR", "logs")
    log_file = os.path.join(log_dir, "docgrid.log")

    logging_config = copy.deepcopy(ConfigManager().get_logging_config())
    if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
        handlers = logging_config.get("handlers", {})
        if "file" in handlers:
            os.makedirs(log_dir, exist_ok=True)
            handlers["file"]["filename"] = log_file
        try:
            logging.config.dictConfig(logging_config)
            logging.getLogger("docgrid").info("===== Logging initialised from config files =====")
        except (ValueError, TypeError, AttributeError, ImportError) as exc:
            _setup_minimal_logging()
            logging.getLogger("docgrid").error("Invalid logging config, using fallback: %s", exc)
    else:
        _setup_minimal_logging()
        logging.getLogger("docgrid").warning("No logging config found, using console fallback")

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Console-only logging used when the config section is missing or broken."""
    minimal_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": "INFO",
            },
        },
        "root": {
            "level": "INFO",
            "handlers": ["console"],
        },
    }
    logging.config.dictConfig(minimal_config)


def _debug_targets() -> List[str]:
    targets: List[str] = []
    if os.environ.get("DOCGRID_DEBUG_TABLES", "").strip().lower() in _TRUTHY:
        targets.extend(TABLE_LOGGERS)
    extra_modules = os.environ.get("DOCGRID_DEBUG_MODULES", "").strip()
    if extra_modules:
        targets.extend(m.strip() for m in extra_modules.split(",") if m.strip())
    return targets


def _apply_debug_overrides() -> None:
    """Raise selected loggers to DEBUG.

    Supports:
    - DOCGRID_DEBUG_TABLES=true -> DEBUG for the table modules
    - DOCGRID_DEBUG_MODULES=comma,separated,logger,names -> DEBUG for listed loggers
    """
    for name in _debug_targets():
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        if not any(h.level <= logging.DEBUG for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            logger.addHandler(handler)
        logger.info("Debug override active for logger '%s'", name)
