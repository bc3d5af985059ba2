"""
Tests for the CLI module.

Tests the command-line interface using Click's testing utilities.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cardbook import __version__
from cardbook.cli import (
    DEFAULT_CONFIG_DIR,
    build_scheduler,
    cli,
    format_contact,
    get_config_dir,
)
from cardbook.card import Contact, Email, PhoneNumber
from cardbook.config import ConfigurationError
from cardbook.sources import DirectorySource, HttpSource

JANE = (
    "BEGIN:VCARD\nVERSION:3.0\nN:Doe;Jane;;;\nFN:Jane Doe\n"
    "TEL;TYPE=CELL:+1 555 0100\nEND:VCARD\n"
)
FAMILY = (
    "BEGIN:VCARD\nVERSION:3.0\nN:Member;Fam;;;\nFN:Fam Member\n"
    "EMAIL:fam@example.com\nCATEGORIES:Family\nEND:VCARD\n"
)
NO_FIELDS = "BEGIN:VCARD\nVERSION:3.0\nN:Fields;No;;;\nFN:No Fields\nEND:VCARD\n"


@pytest.fixture
def cards_dir(tmp_path):
    """Directory with one good card, one thin card and one broken file."""
    directory = tmp_path / "cards"
    directory.mkdir()
    (directory / "a_garbage.vcf").write_text("garbage")
    (directory / "b_jane.vcf").write_text(JANE)
    (directory / "c_nofields.vcf").write_text(NO_FIELDS)
    return directory


@pytest.fixture
def config_dir(tmp_path):
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


class TestHelperFunctions:
    """Tests for CLI helper functions."""

    def test_default_config_dir_is_in_home(self):
        """Test that DEFAULT_CONFIG_DIR is in user's home directory."""
        assert Path.home() / ".cardbook" == DEFAULT_CONFIG_DIR

    def test_get_config_dir_with_custom_path(self, tmp_path):
        """Test get_config_dir returns custom path when provided."""
        assert get_config_dir(str(tmp_path)) == tmp_path.resolve()

    def test_format_contact(self):
        """Test a contact renders its name and fields."""
        contact = Contact(
            uid="abc",
            given_name="Jane",
            family_name="Doe",
            phone_numbers=(PhoneNumber("CELL", "0100"),),
            emails=(Email("", "jane@example.com"),),
        )

        lines = format_contact(contact, verbose=True)

        assert "Jane Doe" in lines[0]
        assert "  Phone: 0100 (CELL)" in lines
        assert "  Email: jane@example.com" in lines
        assert "  ID: abc" in lines


class TestBuildScheduler:
    """Tests for building a scheduler from config and options."""

    def test_directory_option(self, tmp_path):
        """Test --directory selects a directory source."""
        scheduler = build_scheduler({}, directory=str(tmp_path))

        assert isinstance(scheduler.source, DirectorySource)
        assert scheduler.source.path == tmp_path

    def test_url_option_keeps_configured_credentials(self):
        """Test --url replaces only the URL of a configured source."""
        config = {
            "source": {
                "type": "http",
                "url": "https://old.example.com",
                "username": "me",
                "password": "secret",
            }
        }

        scheduler = build_scheduler(config, url="https://new.example.com/book")

        assert isinstance(scheduler.source, HttpSource)
        assert scheduler.source.url == "https://new.example.com/book"
        assert scheduler.source._auth == ("me", "secret")

    def test_category_option_overrides_config(self, tmp_path):
        """Test --category replaces the configured category."""
        config = {"match_category": "Work", "refresh_interval_hours": 6}

        scheduler = build_scheduler(config, directory=str(tmp_path), category="Family")

        assert scheduler.match_category == "Family"
        assert scheduler.interval_hours == 6

    def test_no_source_raises(self):
        """Test a missing source is a configuration error."""
        with pytest.raises(ConfigurationError, match="No card source configured"):
            build_scheduler({})

    def test_directory_and_url_conflict(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not both"):
            build_scheduler({}, directory=str(tmp_path), url="https://x.example")


class TestCliGroup:
    """Tests for the main CLI group."""

    def test_cli_help(self):
        """Test that CLI shows help."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "vCard address book loader" in result.output

    def test_cli_version(self):
        """Test that CLI shows version."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "cardbook" in result.output
        assert __version__ in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_invalid_config_file_warns(self, mock_setup_logging, config_dir, cards_dir):
        """Test a broken config file warns and falls back to options."""
        (config_dir / "config.yaml").write_text("refresh_interval_hours: soon\n")

        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config-dir", str(config_dir), "list", "-d", str(cards_dir)]
        )

        assert result.exit_code == 0
        assert "Configuration error" in result.output
        assert "Jane Doe" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_verbose_from_config(self, mock_setup_logging, config_dir):
        """Test verbose can be enabled from the config file."""
        (config_dir / "config.yaml").write_text("verbose: true\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "init-config"])

        assert result.exit_code == 0
        assert mock_setup_logging.call_args.kwargs["verbose"] is True


class TestListCommand:
    """Tests for the list command."""

    @patch("cardbook.cli.main.setup_logging")
    def test_list_directory(self, mock_setup_logging, config_dir, cards_dir):
        """Test only the qualified contact is printed."""
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config-dir", str(config_dir), "list", "--directory", str(cards_dir)]
        )

        assert result.exit_code == 0
        assert "Contacts (1)" in result.output
        assert "Jane Doe" in result.output
        assert "Phone: +1 555 0100 (CELL)" in result.output
        assert "No Fields" not in result.output
        assert "Read 3 record(s): 2 parsed, 1 skipped, 1 kept." in result.output
        assert "1 record(s) skipped" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_show_skipped(self, mock_setup_logging, config_dir, cards_dir):
        """Test --show-skipped lists parse failures."""
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--config-dir", str(config_dir), "list", "-d", str(cards_dir), "--show-skipped"],
        )

        assert result.exit_code == 0
        assert "Skipped Records (1)" in result.output
        assert "garbage" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_with_category(self, mock_setup_logging, config_dir, cards_dir):
        """Test --category restricts the output."""
        (cards_dir / "d_family.vcf").write_text(FAMILY)

        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "--config-dir",
                str(config_dir),
                "list",
                "-d",
                str(cards_dir),
                "--category",
                "Family",
            ],
        )

        assert result.exit_code == 0
        assert "Fam Member" in result.output
        assert "Jane Doe" not in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_uses_config_source(self, mock_setup_logging, config_dir, cards_dir):
        """Test the source section of the config file is used."""
        (config_dir / "config.yaml").write_text(
            f"source:\n  type: directory\n  path: {cards_dir}\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "list"])

        assert result.exit_code == 0
        assert "Jane Doe" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_without_source_fails(self, mock_setup_logging, config_dir):
        """Test a helpful error when no source is configured."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "list"])

        assert result.exit_code == 1
        assert "No card source configured" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_missing_directory_fails(self, mock_setup_logging, config_dir, tmp_path):
        """Test a source failure exits with an error."""
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--config-dir", str(config_dir), "list", "-d", str(tmp_path / "missing")],
        )

        assert result.exit_code == 1
        assert "Could not read cards" in result.output

    @patch("cardbook.cli.main.setup_logging")
    def test_list_empty_directory(self, mock_setup_logging, config_dir, tmp_path):
        """Test an empty source prints no contacts."""
        empty = tmp_path / "empty"
        empty.mkdir()

        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config-dir", str(config_dir), "list", "-d", str(empty)]
        )

        assert result.exit_code == 0
        assert "No qualified contacts." in result.output


class TestWatchCommand:
    """Tests for the watch command."""

    @patch("cardbook.cli.main.RefreshScheduler.run_until_signal")
    @patch("cardbook.cli.main.setup_logging")
    def test_watch_runs_until_signal(
        self, mock_setup_logging, mock_run, config_dir, cards_dir
    ):
        """Test watch starts the scheduler with the chosen interval."""
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--config-dir", str(config_dir), "watch", "-d", str(cards_dir), "-i", "2"],
        )

        assert result.exit_code == 0
        assert "Refreshing every 2 hour(s)" in result.output
        assert "Stopped after 0 refresh(es); 0 contact(s) published." in result.output
        mock_run.assert_called_once_with(interval_hours=2)

    @patch("cardbook.cli.main.RefreshScheduler.run_until_signal")
    @patch("cardbook.cli.main.setup_logging")
    def test_watch_default_interval(
        self, mock_setup_logging, mock_run, config_dir, cards_dir
    ):
        """Test the configured interval is announced when none is given."""
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config-dir", str(config_dir), "watch", "-d", str(cards_dir)]
        )

        assert result.exit_code == 0
        assert "Refreshing every 24 hour(s)" in result.output
        mock_run.assert_called_once_with(interval_hours=None)

    @patch("cardbook.cli.main.RefreshScheduler.run_until_signal")
    @patch("cardbook.cli.main.setup_logging")
    def test_watch_rejects_zero_interval(
        self, mock_setup_logging, mock_run, config_dir, cards_dir
    ):
        """Test an interval below one hour is refused before starting."""
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--config-dir", str(config_dir), "watch", "-d", str(cards_dir), "-i", "0"],
        )

        assert result.exit_code == 1
        assert "must be >= 1" in result.output
        mock_run.assert_not_called()


class TestInitConfigCommand:
    """Tests for the init-config command."""

    @patch("cardbook.cli.main.setup_logging")
    def test_init_config_creates_file(self, mock_setup_logging, config_dir):
        """Test the sample configuration is written."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "init-config"])

        assert result.exit_code == 0
        assert "Created configuration file" in result.output
        assert (config_dir / "config.yaml").exists()

    @patch("cardbook.cli.main.setup_logging")
    def test_init_config_refuses_existing(self, mock_setup_logging, config_dir):
        """Test an existing file is not overwritten without --force."""
        (config_dir / "config.yaml").write_text("match_category: Work\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "init-config"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert (config_dir / "config.yaml").read_text() == "match_category: Work\n"

    @patch("cardbook.cli.main.setup_logging")
    def test_init_config_force(self, mock_setup_logging, config_dir):
        """Test --force overwrites the existing file."""
        (config_dir / "config.yaml").write_text("match_category: Work\n")

        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config-dir", str(config_dir), "init-config", "--force"]
        )

        assert result.exit_code == 0
        assert "refresh_interval_hours" in (config_dir / "config.yaml").read_text()

    @patch("cardbook.cli.main.setup_logging")
    def test_init_config_custom_file(self, mock_setup_logging, tmp_path):
        """Test --config-file chooses the destination."""
        target = tmp_path / "elsewhere" / "cardbook.yaml"

        runner = CliRunner()
        result = runner.invoke(cli, ["--config-file", str(target), "init-config"])

        assert result.exit_code == 0
        assert target.exists()
