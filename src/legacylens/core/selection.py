"""
Selection state machine.

Tracks the single focused node of the current snapshot:

    Idle          --select(id)--> Selected(id)   (id must exist)
    Selected(id)  --select(id2)-> Selected(id2)
    Selected(id)  --close------->  Idle
    *             --reset------->  Idle          (snapshot replaced)

Selecting an unknown id is a no-op. The dependency and dependent lists
are queried once, on entry to Selected.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .index import DependencyIndex
from .types import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """No node is focused."""

    def is_selected(self) -> bool:
        return False


@dataclass(frozen=True)
class Selected:
    """One node is focused, with its neighbours resolved to labels."""
    node: Node
    dependencies: Tuple[str, ...]
    dependents: Tuple[str, ...]

    @property
    def node_id(self) -> str:
        return self.node.id

    def is_selected(self) -> bool:
        return True


SelectionState = Union[Idle, Selected]

IDLE = Idle()


class SelectionController:
    """
    Holds the selection for one snapshot's index.
    """

    def __init__(self, index: Optional[DependencyIndex] = None):
        self._index = index
        self._state: SelectionState = IDLE

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected(self) -> Optional[Selected]:
        return self._state if isinstance(self._state, Selected) else None

    @property
    def selected_id(self) -> Optional[str]:
        return self._state.node_id if isinstance(self._state, Selected) else None

    def select(self, node_id: str) -> bool:
        """
        Focus `node_id`, replacing any current selection.

        Returns:
            bool: False (and no state change) if the id is not in the index.
        """
        if self._index is None or not self._index.has_node(node_id):
            logger.debug(f"Ignoring selection of unknown node '{node_id}'")
            return False

        node = self._index.graph.node(node_id)
        self._state = Selected(
            node=node,
            dependencies=tuple(self._index.dependencies_of(node_id)),
            dependents=tuple(self._index.dependents_of(node_id)),
        )
        return True

    def close(self) -> None:
        self._state = IDLE

    def reset(self, index: Optional[DependencyIndex] = None) -> None:
        """Drop the selection and bind to a new snapshot's index."""
        self._index = index
        self._state = IDLE
