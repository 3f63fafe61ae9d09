"""
Unit tests for the 'blast' command.
"""

import json

import pytest
from click.testing import CliRunner

from legacylens.client.analysis import AnalysisResponse
from legacylens.cli.commands.blast_radius import blast_radius
from legacylens.cli.utils import save_snapshot
from legacylens.core.demo import DemoManager
from legacylens.core.pipeline import Workspace


@pytest.fixture
def snapshot_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    workspace = Workspace()
    workspace.load(AnalysisResponse.model_validate(DemoManager().payload()))
    return str(save_snapshot(workspace.view(), str(tmp_path / "snapshot.json")))


class TestBlastRadiusCommand:
    """Integration tests for the blast radius CLI."""

    def test_json_output(self, snapshot_file):
        result = CliRunner().invoke(blast_radius, ["DB_Connection_Pool.java", "-i", snapshot_file, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["count"] == 3
        assert data["direct_dependents"] == [
            "OrderController.java",
            "LegacyPaymentGateway.java",
            "InventoryManager.java",
        ]
        assert data["breakdown"]["Critical"] == ["OrderController.java", "LegacyPaymentGateway.java"]

    def test_max_depth(self, snapshot_file):
        result = CliRunner().invoke(
            blast_radius, ["DB_Connection_Pool.java", "-i", snapshot_file, "--max-depth", "0", "--json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["count"] == 0

    def test_nothing_depends_on_root(self, snapshot_file):
        result = CliRunner().invoke(blast_radius, ["OrderController.java", "-i", snapshot_file])

        assert result.exit_code == 0
        assert "Nothing depends on OrderController.java" in result.output

    def test_human_output(self, snapshot_file):
        result = CliRunner().invoke(blast_radius, ["DB_Connection_Pool.java", "-i", snapshot_file])

        assert result.exit_code == 0
        assert "impacted" in result.output

    def test_node_not_found(self, snapshot_file):
        result = CliRunner().invoke(blast_radius, ["ghost_node", "-i", snapshot_file, "--json"])

        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["type"] == "NodeNotFoundError"
