"""
cardbook.sources - Raw vCard source collectors

Directory and HTTP collectors plus the factory that picks one from
configuration.
"""

import logging

from cardbook.config.settings import (
    SOURCE_DIRECTORY,
    SOURCE_HTTP,
    ConfigurationError,
    SourceConfig,
)
from cardbook.sources.base import SourceCollector, SourceError, split_cards
from cardbook.sources.directory import DirectorySource
from cardbook.sources.remote import HttpSource

logger = logging.getLogger(__name__)


def build_source(config: SourceConfig) -> SourceCollector:
    """
    Create the source collector described by a SourceConfig.

    Args:
        config: Source settings

    Returns:
        DirectorySource or HttpSource

    Raises:
        ConfigurationError: If the settings are incomplete or the type unknown
    """
    config.validate()

    if config.type == SOURCE_DIRECTORY:
        source: SourceCollector = DirectorySource(config.path, config.pattern)
    elif config.type == SOURCE_HTTP:
        source = HttpSource(
            config.url,
            username=config.username,
            password=config.password,
            timeout=config.timeout,
        )
    else:
        raise ConfigurationError(f"Unsupported source type '{config.type}'")

    logger.debug(f"Using source {source!r}")
    return source


__all__ = [
    "SourceCollector",
    "SourceError",
    "split_cards",
    "DirectorySource",
    "HttpSource",
    "build_source",
]
