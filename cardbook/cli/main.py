"""
Command-line interface for cardbook.

Provides CLI commands for loading vCard address books once, keeping them
refreshed in the foreground, and creating a configuration file.

Usage:
    # Show help
    cardbook --help

    # Load once and print the qualified contacts
    cardbook list --directory ~/contacts
    cardbook list --url https://dav.example.com/book/?export --category Family

    # Refresh periodically until interrupted
    cardbook watch --interval 6

    # Write a documented configuration file
    cardbook init-config
"""

import sys
from pathlib import Path
from typing import Any

import click

from cardbook import __version__
from cardbook.cli.formatters import show_contacts, show_diagnostics, show_stats
from cardbook.config.generator import save_config_file
from cardbook.config.loader import DEFAULT_CONFIG_FILE as CONFIG_FILE_NAME
from cardbook.config.loader import DEFAULT_CONFIG_DIR, ConfigLoader, resolve_config_dir
from cardbook.config.settings import (
    SOURCE_DIRECTORY,
    SOURCE_HTTP,
    ConfigurationError,
    RefreshConfig,
    SourceConfig,
    validate_interval,
)
from cardbook.refresh.scheduler import RefreshScheduler, SchedulerError
from cardbook.sources import SourceError, build_source
from cardbook.utils.logging import get_logger, setup_logging

# Default configuration file
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / CONFIG_FILE_NAME


def get_config_dir(config_dir: str | None) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_dir: Path, config_file: str | None) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file).expanduser()
    return config_dir / CONFIG_FILE_NAME


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def build_scheduler(
    config: dict[str, Any],
    directory: str | None = None,
    url: str | None = None,
    category: str | None = None,
) -> RefreshScheduler:
    """
    Create a scheduler from the loaded configuration and CLI overrides.

    Raises:
        ConfigurationError: If no usable source is configured
    """
    if directory and url:
        raise ConfigurationError("Use either --directory or --url, not both")

    source_section = dict(config.get("source") or {})
    if directory:
        source_section = {"type": SOURCE_DIRECTORY, "path": directory}
    elif url:
        # Keep configured credentials when only the URL is overridden
        source_section.update({"type": SOURCE_HTTP, "url": url})
        source_section.pop("path", None)

    if not source_section:
        raise ConfigurationError(
            "No card source configured. Pass --directory or --url, "
            "or add a 'source' section to the configuration file."
        )

    refresh_config = RefreshConfig.from_dict(config)
    if category is not None:
        refresh_config = RefreshConfig(
            refresh_interval_hours=refresh_config.refresh_interval_hours,
            match_category=category,
        )

    source = build_source(SourceConfig.from_dict(source_section))
    return RefreshScheduler(source, refresh_config)


source_options = [
    click.option(
        "--directory",
        "-d",
        type=click.Path(exists=False, file_okay=False, dir_okay=True),
        help="Read vCard files from this directory.",
    ),
    click.option("--url", "-u", help="Download a vCard collection from this URL."),
    click.option(
        "--category",
        default=None,
        help="Only keep contacts with this category (overrides config).",
    ),
]


def with_source_options(func: Any) -> Any:
    for option in reversed(source_options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="cardbook")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="CARDBOOK_CONFIG_DIR",
    help="Configuration directory path (default: ~/.cardbook).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="CARDBOOK_CONFIG_FILE",
    help="Configuration file path (default: ~/.cardbook/config.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: str | None,
    config_file: str | None,
) -> None:
    """
    vCard address book loader.

    Reads contact cards from a directory or a remote collection, keeps
    the ones with a name and a birthday, email or phone number, and
    refreshes them periodically.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(resolved_config_dir, config_file)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config: dict[str, Any] = {}
    try:
        loader = ConfigLoader(config_dir=resolved_config_dir)
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
    except ConfigurationError as e:
        # Allow commands to run on CLI options alone
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    ctx.obj["config"] = config

    effective_verbose = verbose or config.get("verbose", False)
    ctx.obj["verbose"] = effective_verbose

    log_dir = Path(config["log_dir"]).expanduser() if config.get("log_dir") else None
    log_file = Path(config["log_file"]).expanduser() if config.get("log_file") else None
    setup_logging(verbose=effective_verbose, log_dir=log_dir, log_file=log_file)


# =============================================================================
# List Command
# =============================================================================


@cli.command("list")
@with_source_options
@click.option(
    "--show-skipped", is_flag=True, help="Show records that could not be parsed."
)
@click.pass_context
def list_command(
    ctx: click.Context,
    directory: str | None,
    url: str | None,
    category: str | None,
    show_skipped: bool,
) -> None:
    """
    Load the address book once and print the qualified contacts.

    Examples:

        cardbook list --directory ~/contacts

        cardbook list --category Family --show-skipped
    """
    logger = get_logger(__name__)
    verbose = ctx.obj["verbose"]

    try:
        scheduler = build_scheduler(ctx.obj["config"], directory, url, category)
    except (ConfigurationError, SourceError) as e:
        _fail(str(e))
        return

    logger.debug(f"Loading contacts from {scheduler.source!r}")
    if not scheduler.run_cycle():
        _fail(f"Could not read cards: {scheduler.stats.last_error}")
        return

    show_contacts(scheduler.current_contacts(), verbose=verbose)
    show_stats(scheduler.stats)

    diagnostics = scheduler.diagnostics.entries()
    if show_skipped or verbose:
        show_diagnostics(diagnostics)
    elif diagnostics:
        click.echo(
            click.style(
                f"{len(diagnostics)} record(s) skipped; "
                "use --show-skipped for details.",
                fg="yellow",
            )
        )


# =============================================================================
# Watch Command
# =============================================================================


@cli.command("watch")
@with_source_options
@click.option(
    "--interval",
    "-i",
    type=int,
    default=None,
    help="Hours between refreshes (overrides config, default 24).",
)
@click.pass_context
def watch_command(
    ctx: click.Context,
    directory: str | None,
    url: str | None,
    category: str | None,
    interval: int | None,
) -> None:
    """
    Refresh the address book periodically until interrupted.

    The first refresh runs immediately. Stop with Ctrl+C or SIGTERM; a
    refresh in progress is allowed to finish.

    Examples:

        cardbook -v watch --directory ~/contacts --interval 1
    """
    try:
        scheduler = build_scheduler(ctx.obj["config"], directory, url, category)
    except (ConfigurationError, SourceError) as e:
        _fail(str(e))
        return

    effective_interval = (
        interval if interval is not None else scheduler.config.refresh_interval_hours
    )

    try:
        validate_interval(effective_interval)
        click.echo(f"Refreshing every {effective_interval} hour(s) (Ctrl+C to stop)...")
        scheduler.run_until_signal(interval_hours=interval)
    except (ConfigurationError, SchedulerError) as e:
        _fail(str(e))
        return

    click.echo(
        f"Stopped after {scheduler.stats.cycle_count} refresh(es); "
        f"{len(scheduler.current_contacts())} contact(s) published."
    )


# =============================================================================
# Init Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force", is_flag=True, help="Overwrite an existing configuration file."
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Write a documented configuration file.

    The file is created at the --config-file location, or config.yaml in
    the configuration directory.
    """
    config_file: Path = ctx.obj["config_file"]

    success, error = save_config_file(config_file, overwrite=force)
    if not success:
        _fail(error or "Failed to create configuration file")
        return

    click.echo(click.style(f"Created configuration file: {config_file}", fg="green"))
    click.echo("Edit the 'source' section, then run: cardbook list")
