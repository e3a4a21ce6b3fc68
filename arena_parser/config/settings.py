"""
Configuration settings for the arena match parser.

Handles environment variables and logging setup for embedding the parser
in a log-tailing service or running it from the command line.
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass


DEFAULT_MAX_BUFFERED_LINES = 20000

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, keeping the default when malformed."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default


@dataclass
class ParserSettings:
    """Parser configuration settings."""

    max_buffered_lines: int = DEFAULT_MAX_BUFFERED_LINES
    log_level: str = "info"
    config_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ParserSettings":
        """Load parser settings from environment variables."""
        return cls(
            max_buffered_lines=_env_int("ARENA_PARSER_MAX_BUFFERED_LINES", DEFAULT_MAX_BUFFERED_LINES),
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
            config_path=os.getenv("ARENA_PARSER_CONFIG") or None,
        )

    def setup_logging(self):
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def validate(self):
        """Validate configuration settings."""
        errors = []

        if self.max_buffered_lines <= 0:
            errors.append(f"Invalid line buffer size: {self.max_buffered_lines}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid log level: {self.log_level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")


# Global settings instance
settings = ParserSettings.from_env()


def get_settings() -> ParserSettings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> ParserSettings:
    """Reload settings from environment variables."""
    global settings
    settings = ParserSettings.from_env()
    return settings
