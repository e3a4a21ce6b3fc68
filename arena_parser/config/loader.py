"""
Configuration loader for custom arena data mappings.

Allows users to provide custom mappings via YAML configuration files, for
example a newly added arena or a new specialization.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, Optional, Any

from . import wow_data

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and applies custom configuration from YAML files."""

    @staticmethod
    def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to custom config file. If None, looks for:
                        1. arena_config.yaml in current directory
                        2. config/arena_config.yaml
                        3. ~/.arena_parser/arena_config.yaml
                        4. /etc/arena_parser/arena_config.yaml

        Returns:
            Configuration dictionary
        """
        search_paths = [
            Path("arena_config.yaml"),
            Path("config/arena_config.yaml"),
            Path.home() / ".arena_parser" / "arena_config.yaml",
            Path("/etc/arena_parser/arena_config.yaml"),
        ]

        if config_path:
            search_paths.insert(0, Path(config_path))

        for path in search_paths:
            if path.exists():
                try:
                    with open(path, "r", encoding="utf-8") as f:
                        config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Failed to load config from {path}: {e}")
                    continue

                if not isinstance(config, dict):
                    logger.error(f"Ignoring config {path}: top level must be a mapping")
                    continue

                logger.info(f"Loaded configuration from {path}")
                return config

        logger.debug("No custom configuration file found, using defaults")
        return {}

    @staticmethod
    def apply_config(config: Dict[str, Any]) -> None:
        """
        Apply custom configuration to the wow_data module.

        Args:
            config: Configuration dictionary from YAML
        """
        if "arena_zones" in config:
            for zone_id, name in (config["arena_zones"] or {}).items():
                try:
                    zone_id = int(zone_id)
                    wow_data.ARENA_ZONE_NAMES[zone_id] = str(name)
                    logger.debug(f"Added arena zone: {zone_id} = {name}")
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid arena zone ID {zone_id}: {e}")

        if "specializations" in config:
            for spec_id, class_id in (config["specializations"] or {}).items():
                try:
                    spec_id = int(spec_id)
                    class_id = int(class_id)
                    wow_data.SPEC_TO_CLASS[spec_id] = class_id
                    logger.debug(f"Added spec mapping: {spec_id} -> class {class_id}")
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid spec mapping {spec_id}: {e}")

        logger.info("Custom configuration applied successfully")


def load_and_apply_config(config_path: Optional[str] = None) -> None:
    """
    Load and apply configuration in one step.

    Args:
        config_path: Optional path to custom config file
    """
    loader = ConfigLoader()
    config = loader.load_config(config_path)
    if config:
        loader.apply_config(config)
