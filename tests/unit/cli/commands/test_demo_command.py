"""
Unit tests for the 'demo' command.
"""

import json

import pytest
from click.testing import CliRunner

from legacylens.cli.commands.demo import demo


class TestDemoCommand:
    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture(autouse=True)
    def in_tmp(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        return tmp_path

    def test_writes_snapshot(self, runner, in_tmp):
        result = runner.invoke(demo, [])

        assert result.exit_code == 0
        assert "Demo snapshot loaded" in result.output
        snapshot = json.loads((in_tmp / ".legacylens" / "snapshot.json").read_text())
        assert len(snapshot["nodes"]) == 6

    def test_json_output(self, runner, in_tmp):
        result = runner.invoke(demo, ["--json", "-o", str(in_tmp / "demo.json")])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["meta"]["status"] == "success"
        assert len(payload["data"]["edges"]) == 7
        assert payload["data"]["stats"]["ranks"] == 3

    def test_scaffold(self, runner, in_tmp):
        result = runner.invoke(demo, ["--scaffold", str(in_tmp / "play")])

        assert result.exit_code == 0
        assert (in_tmp / "play" / "legacylens-demo" / "src" / "OrderController.java").exists()
        assert "Demo sources written to" in result.output
