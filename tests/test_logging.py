"""
Tests for the logging configuration module.

Tests the centralized logging configuration functionality.
"""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest

from cardbook.utils.logging import (
    CONSOLE_FORMAT,
    ROOT_LOGGER_NAME,
    VERBOSE_FORMAT,
    ColoredFormatter,
    get_log_file_path,
    get_log_level_from_env,
    get_logger,
    set_log_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers added by setup_logging after each test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestGetLogLevelFromEnv:
    """Tests for get_log_level_from_env function."""

    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_debug_mode_from_env(self, value):
        """Test debug mode enabled by truthy values."""
        with patch.dict(os.environ, {"CARDBOOK_DEBUG": value}):
            assert get_log_level_from_env() == logging.DEBUG

    def test_log_level_from_env(self):
        """Test log level read from CARDBOOK_LOG_LEVEL."""
        env = {"CARDBOOK_LOG_LEVEL": "warning", "CARDBOOK_DEBUG": ""}
        with patch.dict(os.environ, env):
            assert get_log_level_from_env() == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        """Test unknown level names fall back to INFO."""
        env = {"CARDBOOK_LOG_LEVEL": "LOUD", "CARDBOOK_DEBUG": ""}
        with patch.dict(os.environ, env):
            assert get_log_level_from_env() == logging.INFO

    def test_default_is_info(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_level_from_env() == logging.INFO


class TestGetLogFilePath:
    """Tests for get_log_file_path function."""

    def test_no_file_logging_by_default(self):
        """Test file logging is off without env or directory."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_file_path() is None

    def test_env_overrides(self, tmp_path):
        """Test CARDBOOK_LOG_FILE selects the file."""
        target = tmp_path / "app.log"
        with patch.dict(os.environ, {"CARDBOOK_LOG_FILE": str(target)}):
            assert get_log_file_path(tmp_path / "ignored") == target

    def test_env_can_disable(self, tmp_path):
        """Test CARDBOOK_LOG_FILE=none disables file logging."""
        with patch.dict(os.environ, {"CARDBOOK_LOG_FILE": "none"}):
            assert get_log_file_path(tmp_path) is None

    def test_dated_file_in_log_dir(self, tmp_path):
        """Test a dated file is placed in the log directory."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_log_file_path(tmp_path)
        assert path.parent == tmp_path
        assert path.name.startswith("cardbook_")
        assert path.suffix == ".log"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_console_handler_only(self):
        """Test a single console handler without file settings."""
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging(level=logging.WARNING, use_colors=False)

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == CONSOLE_FORMAT

    def test_verbose_forces_debug(self):
        """Test verbose mode uses DEBUG and the detailed format."""
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging(level=logging.ERROR, verbose=True, use_colors=False)

        assert logger.level == logging.DEBUG
        assert logger.handlers[0].formatter._fmt == VERBOSE_FORMAT

    def test_repeated_setup_does_not_duplicate_handlers(self):
        with patch.dict(os.environ, {}, clear=True):
            setup_logging(use_colors=False)
            logger = setup_logging(use_colors=False)

        assert len(logger.handlers) == 1

    def test_file_handler_records_debug(self, tmp_path):
        """Test the log file captures debug messages."""
        log_file = tmp_path / "logs" / "cardbook.log"
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging(
                level=logging.WARNING, log_file=log_file, use_colors=False
            )

        get_logger("tests").debug("hidden from console")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hidden from console" in log_file.read_text()

    def test_set_log_level_keeps_file_at_debug(self, tmp_path):
        """Test runtime level changes leave the file handler alone."""
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging(
                level=logging.INFO, log_file=tmp_path / "a.log", use_colors=False
            )

        set_log_level(logging.ERROR)

        levels = {type(h): h.level for h in logger.handlers}
        assert levels[logging.FileHandler] == logging.DEBUG
        assert levels[logging.StreamHandler] == logging.ERROR


class TestGetLogger:
    """Tests for get_logger function."""

    def test_prefixes_package_name(self):
        assert get_logger("module").name == "cardbook.module"

    def test_keeps_package_names(self):
        """Test names inside the package are used unchanged."""
        assert get_logger("cardbook.refresh").name == "cardbook.refresh"


class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_no_colors_when_not_a_tty(self):
        """Test colors are disabled for non-terminal output."""
        with patch("sys.stderr", MagicMock(isatty=MagicMock(return_value=False))):
            formatter = ColoredFormatter(CONSOLE_FORMAT)
        assert formatter.use_colors is False

    def test_no_color_env(self):
        """Test NO_COLOR disables colors."""
        stderr = MagicMock(isatty=MagicMock(return_value=True))
        with patch("sys.stderr", stderr), patch.dict(os.environ, {"NO_COLOR": "1"}):
            formatter = ColoredFormatter(CONSOLE_FORMAT)
        assert formatter.use_colors is False

    def test_colors_applied(self):
        """Test level names are wrapped in ANSI codes when enabled."""
        stderr = MagicMock(isatty=MagicMock(return_value=True))
        with patch("sys.stderr", stderr), patch.dict(
            os.environ, {"TERM": "xterm"}, clear=True
        ):
            formatter = ColoredFormatter(CONSOLE_FORMAT)

        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "bad", None, None)
        output = formatter.format(record)

        assert "\033[31m" in output
        assert record.levelname == "ERROR"
