"""CLI package for cardbook."""

from cardbook.cli.formatters import (
    format_contact,
    show_contacts,
    show_diagnostics,
    show_stats,
)
from cardbook.cli.main import (
    DEFAULT_CONFIG_FILE,
    build_scheduler,
    cli,
    get_config_dir,
)
from cardbook.config.loader import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
    "build_scheduler",
    "cli",
    "format_contact",
    "get_config_dir",
    "show_contacts",
    "show_diagnostics",
    "show_stats",
]
