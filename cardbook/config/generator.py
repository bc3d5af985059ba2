"""
Configuration file generator for cardbook.

Provides functionality to generate a default configuration file with
documentation and examples for all available options.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def generate_default_config() -> str:
    """
    Generate default YAML configuration with all options documented.

    Returns:
        String containing YAML configuration with comments
    """
    return """# cardbook Configuration
# ======================
#
# Save as ~/.cardbook/config.yaml (or pass --config-file) and adjust
# the options below. CLI arguments override these values.

# Refresh Options
# ---------------

# Hours between the starts of two refresh cycles. Must be >= 1.
# The first cycle runs immediately when the scheduler starts.
# Default: 24
refresh_interval_hours: 24

# Only publish contacts carrying this category. Leave empty to publish
# every contact that has a name and a birthday, email or phone number.
# Default: ""
match_category: ""


# Source Options
# --------------

source:
  # Where raw vCards come from:
  #   - directory: every file matching `pattern` inside `path`
  #   - http: a vCard collection downloaded from `url`
  type: directory
  path: ~/contacts
  # pattern: "*.vcf"

  # type: http
  # url: https://dav.example.com/addressbooks/me/default/?export
  # username: me
  # password: secret
  # timeout: 30


# Logging Options
# ---------------

# Enable verbose output with detailed logging
# Default: false
# verbose: true

# Directory for dated log files. File logging is off when unset.
# log_dir: ~/.cardbook/logs
"""


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Save default configuration file to specified path.

    Creates parent directories if they don't exist and saves the file with
    owner-only permissions, since it may hold source credentials.

    Args:
        config_path: Path where the config file should be saved
        overwrite: If True, overwrite existing file. If False, fail if file exists.

    Returns:
        Tuple of (success, error_message)
    """
    try:
        config_path = config_path.expanduser().resolve()

        if config_path.exists() and not overwrite:
            return (
                False,
                f"Configuration file already exists: {config_path}\n"
                "Use --force to overwrite.",
            )

        config_path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        config_path.write_text(generate_default_config(), encoding="utf-8")
        config_path.chmod(0o600)

        logger.info(f"Created configuration file: {config_path}")
        return (True, None)

    except OSError as e:
        error_msg = f"Failed to create configuration file: {e}"
        logger.error(error_msg)
        return (False, error_msg)
