from __future__ import annotations

"""Configuration loading and access helpers.

All declarative data of the library (the default document schema and the
logging setup) lives in YAML files packaged with :mod:`docgrid.config`.
Each file may be overridden by a same-named file in the user configuration
directory:

``$DOCGRID_CONFIG_DIR/*.yml`` when the variable is set, ``~/.docgrid/*.yml``
otherwise.

Overrides are merged key by key into the packaged mapping, descending into
nested mappings, so a user file only needs the entries it changes.
"""

import importlib.resources as pkg_resources
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager"]


def _get_user_config_dir() -> Path:
    """Return the directory searched for user overrides."""
    configured = os.environ.get("DOCGRID_CONFIG_DIR", "").strip()
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".docgrid"


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge *override* into *base* in place; nested mappings are merged too."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge(current, value)
        else:
            base[key] = value
    return base


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "schema": "default_schema.yml",
        "logging": "logging.yml",
    }

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._status: Dict[str, str] = {}
        self._ensure_loaded()

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_schema_config(self) -> Dict[str, Any]:
        return self._data.get("schema", {})

    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    def status(self, key: str) -> str:
        """Load status of a section: ``loaded``, ``loaded+overrides``, ``missing`` or ``invalid``."""
        return self._status.get(key, "missing")

    def reload(self) -> None:
        """Drop cached sections and read every file again (user overrides included)."""
        self._data = {}
        self._status = {}
        self._ensure_loaded()

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return  # already loaded

        startup_summary = []
        user_config_dir = _get_user_config_dir()

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. load packaged default
            try:
                packaged = pkg_resources.files(__package__).joinpath(filename).read_text(encoding="utf-8")
                merged_cfg.update(yaml.safe_load(packaged) or {})
                status = "loaded"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                status = "invalid"

            # 2. merge user overrides
            user_path = user_config_dir / filename
            if user_path.is_file():
                try:
                    user_data = yaml.safe_load(user_path.read_text(encoding="utf-8")) or {}
                    if not isinstance(user_data, Mapping):
                        raise yaml.YAMLError(f"top level must be a mapping, got {type(user_data).__name__}")
                    _merge(merged_cfg, user_data)
                    if status == "loaded":
                        status = "loaded+overrides"
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            self._status[key] = status
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))
