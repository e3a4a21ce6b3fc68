"""
Configuration module for the arena match parser.

Provides parser settings, game data mappings, and YAML overrides.
"""

from .settings import (
    ParserSettings,
    DEFAULT_MAX_BUFFERED_LINES,
    get_settings,
    reload_settings,
)
from .loader import ConfigLoader, load_and_apply_config

__all__ = [
    "ParserSettings",
    "DEFAULT_MAX_BUFFERED_LINES",
    "get_settings",
    "reload_settings",
    "ConfigLoader",
    "load_and_apply_config",
]
