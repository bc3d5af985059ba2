"""
cardbook.utils - Utility module

Logging configuration shared by the CLI and library modules.
"""

from cardbook.utils.logging import get_logger, set_log_level, setup_logging

__all__ = ["setup_logging", "get_logger", "set_log_level"]
