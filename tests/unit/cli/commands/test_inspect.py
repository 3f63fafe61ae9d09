"""
Unit tests for the 'inspect' command.
"""

import json

import pytest
from click.testing import CliRunner

from legacylens.client.analysis import AnalysisResponse
from legacylens.cli.commands.inspect import inspect
from legacylens.cli.utils import save_snapshot
from legacylens.core.demo import DemoManager
from legacylens.core.pipeline import Workspace


@pytest.fixture
def snapshot_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    workspace = Workspace()
    workspace.load(AnalysisResponse.model_validate(DemoManager().payload()))
    return str(save_snapshot(workspace.view(), str(tmp_path / "snapshot.json")))


class TestInspectCommand:
    def test_json_output(self, snapshot_file):
        result = CliRunner().invoke(inspect, ["DB_Connection_Pool.java", "-i", snapshot_file, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["type"] == "fragile"
        assert data["risk"] == "Critical"
        assert data["dependencies"] == []
        assert data["dependents"] == [
            "OrderController.java",
            "LegacyPaymentGateway.java",
            "InventoryManager.java",
        ]

    def test_human_output(self, snapshot_file):
        result = CliRunner().invoke(inspect, ["InventoryManager.java", "-i", snapshot_file])

        assert result.exit_code == 0
        assert "Standard Unit" in result.output
        assert "DB_Connection_Pool.java" in result.output

    def test_unknown_node(self, snapshot_file):
        result = CliRunner().invoke(inspect, ["Ghost.java", "-i", snapshot_file, "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["meta"]["status"] == "error"
        assert payload["error"]["type"] == "NodeNotFoundError"

    def test_missing_snapshot(self, tmp_path):
        result = CliRunner().invoke(inspect, ["A", "-i", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Snapshot not found" in result.output
