"""
Unit tests for the selection state machine.
"""

import pytest

from legacylens.core.demo import DemoManager
from legacylens.core.graph import normalize
from legacylens.core.index import DependencyIndex
from legacylens.core.selection import IDLE, Idle, Selected, SelectionController


@pytest.fixture
def index():
    payload = DemoManager().payload()
    return DependencyIndex.build(normalize(payload["nodes"], payload["edges"]))


class TestSelectionController:
    def test_starts_idle(self, index):
        controller = SelectionController(index)

        assert controller.state is IDLE
        assert controller.selected is None
        assert controller.selected_id is None

    def test_select_known_node(self, index):
        controller = SelectionController(index)

        assert controller.select("DB_Connection_Pool.java") is True
        state = controller.state
        assert isinstance(state, Selected)
        assert state.node_id == "DB_Connection_Pool.java"
        assert state.dependencies == ()
        assert state.dependents == (
            "OrderController.java",
            "LegacyPaymentGateway.java",
            "InventoryManager.java",
        )

    def test_select_unknown_is_noop(self, index):
        controller = SelectionController(index)
        controller.select("EmailService.java")

        assert controller.select("Ghost.java") is False
        assert controller.selected_id == "EmailService.java"

    def test_select_without_index_is_noop(self):
        controller = SelectionController()

        assert controller.select("anything") is False
        assert isinstance(controller.state, Idle)

    def test_reselect_replaces(self, index):
        controller = SelectionController(index)
        controller.select("EmailService.java")
        controller.select("InventoryManager.java")

        assert controller.selected_id == "InventoryManager.java"
        assert controller.selected.dependencies == ("DB_Connection_Pool.java",)

    def test_close_returns_to_idle(self, index):
        controller = SelectionController(index)
        controller.select("EmailService.java")
        controller.close()

        assert controller.state is IDLE
        assert not controller.state.is_selected()

    def test_reset_rebinds_index(self, index):
        controller = SelectionController(index)
        controller.select("EmailService.java")

        other = DependencyIndex.build(normalize([{"id": "X"}], []))
        controller.reset(other)

        assert controller.state is IDLE
        assert controller.select("EmailService.java") is False
        assert controller.select("X") is True

    def test_selected_id_always_exists(self, index):
        controller = SelectionController(index)
        for node_id in ["A", "EmailService.java", "", "UserSession.java", "Z"]:
            controller.select(node_id)
            if controller.selected_id is not None:
                assert index.has_node(controller.selected_id)
