"""
Dependency Index.

Forward (dependencies) and reverse (dependents) adjacency maps over a
Graph snapshot. Built in a single pass over the edges; each adjacency
list keeps edge insertion order so query results are stable.
"""

from collections import defaultdict, deque
from typing import Dict, List, Set, Tuple

from .types import Graph


class DependencyIndex:
    """
    Bidirectional adjacency index for one snapshot.

    Lookups are O(1) plus O(k) to materialize k results. Unknown ids
    return empty lists.
    """

    def __init__(self, graph: Graph):
        self._graph = graph
        self._outgoing: Dict[str, List[str]] = defaultdict(list)
        self._incoming: Dict[str, List[str]] = defaultdict(list)

        for edge in graph.edges:
            self._outgoing[edge.source].append(edge.target)
            self._incoming[edge.target].append(edge.source)

    @classmethod
    def build(cls, graph: Graph) -> "DependencyIndex":
        return cls(graph)

    @property
    def graph(self) -> Graph:
        return self._graph

    def has_node(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    def dependency_ids_of(self, node_id: str) -> List[str]:
        """IDs of nodes that `node_id` points to."""
        return list(self._outgoing.get(node_id, ()))

    def dependent_ids_of(self, node_id: str) -> List[str]:
        """IDs of nodes pointing at `node_id`."""
        return list(self._incoming.get(node_id, ()))

    def dependencies_of(self, node_id: str) -> List[str]:
        """Labels of the nodes `node_id` depends on, in edge order."""
        return [self._graph.label_of(t) for t in self._outgoing.get(node_id, ())]

    def dependents_of(self, node_id: str) -> List[str]:
        """Labels of the nodes that depend on `node_id`, in edge order."""
        return [self._graph.label_of(s) for s in self._incoming.get(node_id, ())]

    def transitive_dependents(self, node_id: str, max_depth: int = -1) -> List[Tuple[str, int]]:
        """
        Everything that breaks, directly or indirectly, when `node_id` changes.

        Breadth-first over the reverse map. Cycles are visited once.

        Args:
            node_id: The changed node.
            max_depth: Maximum number of hops (-1 for unlimited).

        Returns:
            (node id, distance) pairs in discovery order, excluding the start.
        """
        if not self._graph.has_node(node_id):
            return []

        visited: Set[str] = {node_id}
        result: List[Tuple[str, int]] = []
        queue = deque([(node_id, 0)])

        while queue:
            current, depth = queue.popleft()
            if max_depth >= 0 and depth >= max_depth:
                continue
            for source in self._incoming.get(current, ()):
                if source in visited:
                    continue
                visited.add(source)
                result.append((source, depth + 1))
                queue.append((source, depth + 1))

        return result

    def find_orphans(self) -> List[str]:
        """Nodes with no connections."""
        return [
            node_id for node_id in self._graph.node_ids()
            if not self._outgoing.get(node_id) and not self._incoming.get(node_id)
        ]
