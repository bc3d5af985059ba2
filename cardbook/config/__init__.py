"""
cardbook.config - Configuration management module

Contains YAML configuration loading, typed settings and the sample
configuration generator.
"""

from cardbook.config.generator import generate_default_config, save_config_file
from cardbook.config.loader import DEFAULT_CONFIG_FILE, ConfigLoader
from cardbook.config.settings import (
    DEFAULT_REFRESH_INTERVAL_HOURS,
    SOURCE_DIRECTORY,
    SOURCE_HTTP,
    VALID_SOURCE_TYPES,
    ConfigurationError,
    RefreshConfig,
    SourceConfig,
    validate_interval,
)

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "RefreshConfig",
    "SourceConfig",
    "validate_interval",
    "generate_default_config",
    "save_config_file",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_REFRESH_INTERVAL_HOURS",
    "SOURCE_DIRECTORY",
    "SOURCE_HTTP",
    "VALID_SOURCE_TYPES",
]
