"""Unit tests for CLI utilities."""

import json

import pytest

from legacylens.client.analysis import AnalysisResponse
from legacylens.core.demo import DemoManager
from legacylens.core.exceptions import LegacyLensError, SnapshotNotFoundError
from legacylens.core.pipeline import Workspace
from legacylens.cli.utils import echo_error, load_snapshot, save_snapshot


@pytest.fixture
def demo_view():
    workspace = Workspace()
    workspace.load(AnalysisResponse.model_validate(DemoManager().payload()))
    return workspace.view()


class TestUtils:
    def test_save_and_load_snapshot(self, tmp_path, demo_view):
        path = save_snapshot(demo_view, str(tmp_path / "out" / "snapshot.json"))

        assert path.exists()
        workspace = load_snapshot(str(path))
        assert workspace.snapshot.graph == demo_view.snapshot.graph

    def test_load_snapshot_from_directory(self, tmp_path, demo_view):
        save_snapshot(demo_view, str(tmp_path / ".legacylens" / "snapshot.json"))

        # Pass directory, expect it to find .legacylens/snapshot.json
        workspace = load_snapshot(str(tmp_path))
        assert workspace.snapshot.graph.node_count == 6

    def test_load_snapshot_missing(self, tmp_path):
        with pytest.raises(SnapshotNotFoundError):
            load_snapshot(str(tmp_path / "missing.json"))

    def test_load_snapshot_corrupt(self, tmp_path):
        f = tmp_path / "snapshot.json"
        f.write_text("{not json")

        with pytest.raises(LegacyLensError, match="Failed to load snapshot"):
            load_snapshot(str(f))

    def test_saved_snapshot_is_service_shaped(self, tmp_path, demo_view):
        path = save_snapshot(demo_view, str(tmp_path / "snapshot.json"))
        data = json.loads(path.read_text())

        assert {"summary", "nodes", "edges"} <= set(data)
        assert data["nodes"][0]["data"]["label"] == "OrderController.java"

    def test_echo_error_goes_to_stderr(self, capsys):
        echo_error("Something broke")
        captured = capsys.readouterr()
        assert "Something broke" in captured.err
