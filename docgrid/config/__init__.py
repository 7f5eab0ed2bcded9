"""Packaged YAML configuration (default schema, logging) and its loader."""

from .manager import ConfigManager

__all__ = [
    "ConfigManager",
]
