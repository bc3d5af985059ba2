"""
Configuration loader module for cardbook.

Provides YAML-based configuration file loading with support for:
- Loading configuration from default or custom paths
- Graceful handling of missing configuration files
- Validation of configuration structure and value ranges
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from cardbook.config.settings import (
    VALID_SOURCE_TYPES,
    ConfigurationError,
)

# Default configuration directory and file name
DEFAULT_CONFIG_DIR = Path.home() / ".cardbook"
DEFAULT_CONFIG_FILE = "config.yaml"

# Overrides DEFAULT_CONFIG_DIR when set
CONFIG_DIR_ENV_VAR = "CARDBOOK_CONFIG_DIR"

logger = logging.getLogger(__name__)


def resolve_config_dir(config_dir: Path | str | None = None) -> Path:
    """
    Pick the configuration directory.

    An explicit argument wins, then $CARDBOOK_CONFIG_DIR, then ~/.cardbook.
    """
    chosen = config_dir if config_dir is not None else os.environ.get(
        CONFIG_DIR_ENV_VAR
    )
    return Path(chosen or DEFAULT_CONFIG_DIR).expanduser().resolve()


class ConfigLoader:
    """
    YAML configuration file loader.

    Attributes:
        config_dir: Directory containing the configuration file
        config_file: Name of the configuration file

    Usage:
        loader = ConfigLoader()
        config = loader.load_and_validate()

        # Load from specific file
        config = loader.load_from_file("/path/to/config.yaml")
    """

    # Top level keys and their expected types
    VALID_KEYS: dict[str, type[Any] | tuple[type[Any], ...]] = {
        "refresh_interval_hours": int,
        "match_category": str,
        "source": dict,
        "verbose": bool,
        "log_dir": str,
        "log_file": str,
    }

    # Keys of the "source" section and their expected types
    VALID_SOURCE_KEYS: dict[str, type[Any] | tuple[type[Any], ...]] = {
        "type": str,
        "path": str,
        "pattern": str,
        "url": str,
        "username": str,
        "password": str,
        "timeout": (int, float),
    }

    def __init__(
        self, config_dir: Path | None = None, config_file: str = DEFAULT_CONFIG_FILE
    ):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing the configuration file.
                       Defaults to ~/.cardbook/ or $CARDBOOK_CONFIG_DIR
            config_file: Name of the configuration file (default: config.yaml)
        """
        self.config_dir = resolve_config_dir(config_dir)
        self.config_file = config_file

    def _get_config_path(self) -> Path:
        """Get the full path to the configuration file."""
        return self.config_dir / self.config_file

    def load(self) -> dict[str, Any]:
        """
        Load configuration from the default configuration file.

        Returns:
            Configuration dictionary, or empty dict if the file doesn't exist

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        return self.load_from_file(self._get_config_path())

    def load_from_file(self, path: Path | str) -> dict[str, Any]:
        """
        Load configuration from a specific file.

        Args:
            path: Path to the configuration file

        Returns:
            Configuration dictionary, or empty dict if the file doesn't exist

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            logger.debug(f"Configuration file not found: {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)

            if config is None:
                logger.debug(f"Configuration file is empty: {path}")
                return {}

            if not isinstance(config, dict):
                raise ConfigurationError(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(config).__name__}"
                )

            logger.debug(f"Loaded configuration from {path}")
            return config

        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration file: {e}"
            ) from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}") from e

    @staticmethod
    def _check_types(
        data: dict[str, Any],
        valid_keys: dict[str, type[Any] | tuple[type[Any], ...]],
        prefix: str = "",
    ) -> None:
        for key, value in data.items():
            if key not in valid_keys:
                logger.debug(f"Ignoring unknown configuration key '{prefix}{key}'")
                continue

            expected_type = valid_keys[key]
            # bool is an int subclass; reject it where a number is expected
            wrong_bool = isinstance(value, bool) and expected_type is not bool
            if wrong_bool or not isinstance(value, expected_type):
                if isinstance(expected_type, tuple):
                    type_name = " or ".join(t.__name__ for t in expected_type)
                else:
                    type_name = expected_type.__name__
                raise ConfigurationError(
                    f"Invalid type for '{prefix}{key}': expected {type_name}, "
                    f"got {type(value).__name__}"
                )

    def validate(self, config: dict[str, Any]) -> None:
        """
        Validate configuration structure and values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration must be a dictionary, got {type(config).__name__}"
            )

        self._check_types(config, self.VALID_KEYS)

        if "refresh_interval_hours" in config:
            interval = config["refresh_interval_hours"]
            if interval < 1:
                raise ConfigurationError(
                    f"refresh_interval_hours must be >= 1, got {interval}"
                )

        source = config.get("source")
        if source is not None:
            self._check_types(source, self.VALID_SOURCE_KEYS, prefix="source.")

            source_type = str(source.get("type", "directory")).lower()
            if source_type not in VALID_SOURCE_TYPES:
                raise ConfigurationError(
                    f"Invalid source type '{source_type}'. "
                    f"Must be one of: {', '.join(VALID_SOURCE_TYPES)}"
                )

            if "timeout" in source and source["timeout"] <= 0:
                raise ConfigurationError(
                    f"source.timeout must be > 0, got {source['timeout']}"
                )

    def load_and_validate(self) -> dict[str, Any]:
        """
        Load configuration and validate it.

        Returns:
            Validated configuration dictionary

        Raises:
            ConfigurationError: If configuration cannot be loaded or is invalid
        """
        config = self.load()
        if config:
            self.validate(config)
        return config
