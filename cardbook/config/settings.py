"""
Typed configuration for refresh cycles and card sources.

The YAML configuration file is loaded as a plain dictionary by
ConfigLoader; the dataclasses below turn the relevant sections into
validated settings objects.

Configuration file format (config.yaml):

    refresh_interval_hours: 24
    match_category: Family
    source:
      type: directory
      path: ~/contacts

Notes:
    - An empty or missing match_category means "publish every qualified
      contact regardless of category"
    - source.type is either "directory" (path) or "http" (url, with
      optional username and password)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Default refresh interval in hours
DEFAULT_REFRESH_INTERVAL_HOURS = 24

# Supported source types
SOURCE_DIRECTORY = "directory"
SOURCE_HTTP = "http"
VALID_SOURCE_TYPES = (SOURCE_DIRECTORY, SOURCE_HTTP)

# Default glob for vCard files in a directory source
DEFAULT_CARD_PATTERN = "*.vcf"

# Default HTTP timeout for remote sources, in seconds
DEFAULT_HTTP_TIMEOUT = 30.0


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass(frozen=True)
class RefreshConfig:
    """
    Settings for the refresh scheduler.

    Attributes:
        refresh_interval_hours: Hours between the starts of two cycles (>= 1)
        match_category: Category a contact must carry to be published,
            or "" for no restriction

    Usage:
        config = RefreshConfig(refresh_interval_hours=6, match_category="Work")
        config.validate()
    """

    refresh_interval_hours: int = DEFAULT_REFRESH_INTERVAL_HOURS
    match_category: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RefreshConfig:
        """
        Create a RefreshConfig from the top level of a configuration dict.

        Args:
            data: Configuration dictionary, or None for defaults

        Returns:
            Validated RefreshConfig

        Raises:
            ConfigurationError: If a value is missing the right type or range
        """
        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a dictionary, got {type(data).__name__}"
            )

        match_category = data.get("match_category")
        config = cls(
            refresh_interval_hours=data.get(
                "refresh_interval_hours", DEFAULT_REFRESH_INTERVAL_HOURS
            ),
            match_category="" if match_category is None else match_category,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check the settings.

        Raises:
            ConfigurationError: If the interval is not a positive integer
                or the match category is not a string
        """
        validate_interval(self.refresh_interval_hours)

        if not isinstance(self.match_category, str):
            raise ConfigurationError(
                f"match_category must be a string, "
                f"got {type(self.match_category).__name__}"
            )


def validate_interval(interval_hours: Any) -> int:
    """
    Validate a refresh interval expressed in hours.

    Returns:
        The interval, unchanged

    Raises:
        ConfigurationError: If the interval is not an integer >= 1
    """
    # bool is an int subclass but never a meaningful interval
    if isinstance(interval_hours, bool) or not isinstance(interval_hours, int):
        raise ConfigurationError(
            f"refresh_interval_hours must be an integer, "
            f"got {type(interval_hours).__name__}"
        )
    if interval_hours < 1:
        raise ConfigurationError(
            f"refresh_interval_hours must be >= 1, got {interval_hours}"
        )
    return interval_hours


@dataclass(frozen=True)
class SourceConfig:
    """
    Settings describing where raw vCard records come from.

    Attributes:
        type: "directory" or "http"
        path: Directory scanned for vCard files (directory sources)
        pattern: Glob applied inside the directory
        url: Address of the vCard collection (http sources)
        username: Optional basic auth user name (http sources)
        password: Optional basic auth password (http sources)
        timeout: Request timeout in seconds (http sources)
    """

    type: str = SOURCE_DIRECTORY
    path: Path | None = None
    pattern: str = DEFAULT_CARD_PATTERN
    url: str | None = None
    username: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SourceConfig:
        """
        Create a SourceConfig from the "source" section of a configuration.

        Raises:
            ConfigurationError: If the section is malformed
        """
        if data is None:
            raise ConfigurationError("Configuration has no 'source' section")

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"source configuration must be a dictionary, "
                f"got {type(data).__name__}"
            )

        path = data.get("path")
        config = cls(
            type=str(data.get("type", SOURCE_DIRECTORY)).lower(),
            path=Path(path).expanduser() if path else None,
            pattern=data.get("pattern", DEFAULT_CARD_PATTERN),
            url=data.get("url"),
            username=data.get("username"),
            password=data.get("password"),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check that the fields required by the source type are present.

        Raises:
            ConfigurationError: If the source type is unknown or incomplete
        """
        if self.type not in VALID_SOURCE_TYPES:
            raise ConfigurationError(
                f"Invalid source type '{self.type}'. "
                f"Must be one of: {', '.join(VALID_SOURCE_TYPES)}"
            )

        if self.type == SOURCE_DIRECTORY and self.path is None:
            raise ConfigurationError("Directory source requires 'path'")

        if self.type == SOURCE_HTTP:
            if not self.url:
                raise ConfigurationError("HTTP source requires 'url'")
            if not str(self.url).startswith(("http://", "https://")):
                raise ConfigurationError(f"Invalid source URL scheme: {self.url}")
            if self.password and not self.username:
                raise ConfigurationError("Source password given without username")

        if isinstance(self.timeout, bool) or not isinstance(
            self.timeout, (int, float)
        ):
            raise ConfigurationError(
                f"source timeout must be a number, got {type(self.timeout).__name__}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"source timeout must be > 0, got {self.timeout}")
