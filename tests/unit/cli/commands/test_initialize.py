"""
Unit tests for the 'init' command.
"""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from legacylens.cli.commands.initialize import init
from legacylens.config import Settings


class TestInitCommand:
    """Test the init command."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def mock_cwd(self, tmp_path):
        """Mock current working directory to a temp path."""
        with patch("pathlib.Path.cwd", return_value=tmp_path):
            yield tmp_path

    def test_init_creates_default_config(self, runner, mock_cwd):
        result = runner.invoke(init)

        assert result.exit_code == 0
        assert "Initialized successfully" in result.output

        config_path = mock_cwd / ".legacylens/config.yaml"
        with open(config_path) as f:
            config = yaml.safe_load(f)

        assert config["version"] == "1.0"
        assert config["layout"]["node_width"] == 240
        assert Settings.load(config_path) == Settings()

    def test_init_reports_source_files(self, runner, mock_cwd):
        (mock_cwd / "App.java").write_text("class App {}")

        result = runner.invoke(init)

        assert "Found" in result.output
        assert "1" in result.output

    def test_init_updates_gitignore(self, runner, mock_cwd):
        (mock_cwd / ".gitignore").write_text("*.pyc\n")

        runner.invoke(init)

        content = (mock_cwd / ".gitignore").read_text()
        assert "*.pyc" in content
        assert ".legacylens/" in content

    @patch("legacylens.cli.commands.initialize.Confirm.ask")
    def test_existing_config_declined(self, mock_confirm, runner, mock_cwd):
        config_path = mock_cwd / ".legacylens" / "config.yaml"
        config_path.parent.mkdir()
        config_path.write_text("custom: true\n")
        mock_confirm.return_value = False

        result = runner.invoke(init)

        assert "Aborted" in result.output
        assert config_path.read_text() == "custom: true\n"

    @patch("legacylens.cli.commands.initialize.Confirm.ask")
    def test_force_skips_prompt(self, mock_confirm, runner, mock_cwd):
        config_path = mock_cwd / ".legacylens" / "config.yaml"
        config_path.parent.mkdir()
        config_path.write_text("custom: true\n")

        result = runner.invoke(init, ["--force"])

        assert result.exit_code == 0
        mock_confirm.assert_not_called()
        assert "analysis" in yaml.safe_load(config_path.read_text())
