"""
Layered Layout Engine.

Computes deterministic 2-D coordinates for a Graph using a layered
(Sugiyama-style) drawing:

1. Rank assignment: longest-path distance from source nodes over a
   rustworkx DAG. Back edges found by depth-first search are logged and
   left out of ranking, so cyclic dependencies are ranked by their tree
   edges only.
2. Ordering: alternating barycenter sweeps reduce edge crossings inside
   each rank; ties break on node id.
3. Coordinates: rank and in-rank order scaled by box size plus spacing,
   each rank centered against the widest one.

Layout is a pure function of graph structure and LayoutConfig. If ranking
cannot complete, nodes are stacked top to bottom in insertion order.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

import rustworkx as rx
from pydantic import BaseModel, ConfigDict
from rustworkx.visit import DFSVisitor

from ..config import LayoutConfig
from ..core.types import Graph, Position

logger = logging.getLogger(__name__)


class LayoutResult(BaseModel):
    """Coordinates plus the intermediate structure that produced them."""

    model_config = ConfigDict(frozen=True)

    positions: Dict[str, Position]
    ranks: Dict[str, int]
    layers: Tuple[Tuple[str, ...], ...]
    back_edges: Tuple[str, ...] = ()
    crossings: int = 0
    fallback: bool = False

    @property
    def rank_count(self) -> int:
        return len(self.layers)


class _BackEdgeCollector(DFSVisitor):
    """Records the edge payloads (edge ordinals) that close a cycle."""

    def __init__(self):
        self.back_edges: Set[int] = set()

    def back_edge(self, e):
        self.back_edges.add(e[2])


class LayoutEngine:
    """
    Layered graph drawing behind a narrow `compute(graph)` interface.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def compute(self, graph: Graph) -> LayoutResult:
        node_ids = graph.node_ids()

        try:
            ranks, back_edges = self._assign_ranks(graph)
        except rx.DAGHasCycle as e:
            logger.error(f"Rank assignment failed ({e}), falling back to stacked layout")
            return self._stacked(node_ids)

        layers = self._build_layers(node_ids, ranks)
        links = self._layer_links(graph, ranks)
        layers, crossings = self._order(layers, links, ranks)
        positions = self._coordinates(node_ids, layers)

        logger.debug(
            f"Laid out {len(node_ids)} nodes in {len(layers)} ranks "
            f"({crossings} crossings, {len(back_edges)} back edges)"
        )

        return LayoutResult(
            positions=positions,
            ranks={node_id: ranks[node_id] for node_id in node_ids},
            layers=tuple(tuple(layer) for layer in layers),
            back_edges=tuple(back_edges),
            crossings=crossings,
        )

    # =========================================================================
    # Rank assignment
    # =========================================================================

    def _assign_ranks(self, graph: Graph) -> Tuple[Dict[str, int], List[str]]:
        """
        Longest-path ranking over the graph minus its DFS back edges.

        Returns:
            Ranks keyed by node id, and the ids of the ignored back edges.

        Raises:
            rx.DAGHasCycle: If the reduced graph is still cyclic.
        """
        node_ids = graph.node_ids()
        dag = rx.PyDiGraph(multigraph=True)
        indices = dict(zip(node_ids, dag.add_nodes_from(node_ids)))

        edge_indices: List[int] = []
        for ordinal, edge in enumerate(graph.edges):
            edge_indices.append(dag.add_edge(indices[edge.source], indices[edge.target], ordinal))

        # Sources first so forward edges become tree edges where possible
        starts = [indices[n] for n in node_ids if dag.in_degree(indices[n]) == 0]
        starts += [indices[n] for n in node_ids if dag.in_degree(indices[n]) > 0]

        collector = _BackEdgeCollector()
        rx.dfs_search(dag, starts, collector)

        back_edges: List[str] = []
        for ordinal in sorted(collector.back_edges):
            edge = graph.edges[ordinal]
            dag.remove_edge_from_index(edge_indices[ordinal])
            back_edges.append(edge.id)
            if edge.is_self_loop:
                logger.warning(f"Self-dependency on {edge.source} ignored for ranking")
            else:
                logger.warning(
                    f"Cycle detected: {edge.source} -> {edge.target} ignored for ranking"
                )

        ranks: Dict[str, int] = {node_id: 0 for node_id in node_ids}
        for idx in rx.topological_sort(dag):
            node_id = dag[idx]
            for pred in dag.predecessors(idx):
                ranks[node_id] = max(ranks[node_id], ranks[pred] + 1)

        return ranks, back_edges

    @staticmethod
    def _build_layers(node_ids: List[str], ranks: Dict[str, int]) -> List[List[str]]:
        layers: List[List[str]] = [[] for _ in range(max(ranks.values(), default=0) + 1)]
        for node_id in node_ids:
            layers[ranks[node_id]].append(node_id)
        return layers

    @staticmethod
    def _layer_links(graph: Graph, ranks: Dict[str, int]) -> List[Tuple[str, str]]:
        """Edges oriented from the upper rank to the lower one."""
        links: List[Tuple[str, str]] = []
        for edge in graph.edges:
            upper, lower = edge.source, edge.target
            if ranks[upper] == ranks[lower]:
                continue
            if ranks[upper] > ranks[lower]:
                upper, lower = lower, upper
            links.append((upper, lower))
        return links

    # =========================================================================
    # Ordering
    # =========================================================================

    def _order(
        self,
        layers: List[List[str]],
        links: List[Tuple[str, str]],
        ranks: Dict[str, int],
    ) -> Tuple[List[List[str]], int]:
        """
        Barycenter sweeps, keeping the ordering with the fewest crossings.
        """
        upper_of: Dict[str, List[str]] = defaultdict(list)
        lower_of: Dict[str, List[str]] = defaultdict(list)
        for upper, lower in links:
            upper_of[lower].append(upper)
            lower_of[upper].append(lower)

        current = [list(layer) for layer in layers]
        pos = _positions_in_layers(current)

        best = [list(layer) for layer in current]
        best_crossings = _count_crossings(links, ranks, pos)

        for sweep in range(self.config.ordering_passes):
            if sweep % 2 == 0:
                rank_order = range(1, len(current))
                neighbours = upper_of
            else:
                rank_order = range(len(current) - 2, -1, -1)
                neighbours = lower_of

            for r in rank_order:
                current[r] = _sort_by_barycenter(current[r], neighbours, pos)
                for i, node_id in enumerate(current[r]):
                    pos[node_id] = i

            crossings = _count_crossings(links, ranks, pos)
            if crossings < best_crossings:
                best = [list(layer) for layer in current]
                best_crossings = crossings

        return best, best_crossings

    # =========================================================================
    # Coordinates
    # =========================================================================

    def _coordinates(self, node_ids: List[str], layers: List[List[str]]) -> Dict[str, Position]:
        step_x = self.config.node_width + self.config.horizontal_spacing
        step_y = self.config.node_height + self.config.vertical_spacing

        widest = max(len(layer) for layer in layers)
        max_span = (widest - 1) * step_x

        placed: Dict[str, Position] = {}
        for rank, layer in enumerate(layers):
            offset = (max_span - (len(layer) - 1) * step_x) / 2
            for order, node_id in enumerate(layer):
                placed[node_id] = Position(x=offset + order * step_x, y=rank * step_y)

        return {node_id: placed[node_id] for node_id in node_ids}

    def _stacked(self, node_ids: List[str]) -> LayoutResult:
        step_y = self.config.node_height + self.config.vertical_spacing
        return LayoutResult(
            positions={
                node_id: Position(x=0.0, y=i * step_y)
                for i, node_id in enumerate(node_ids)
            },
            ranks={node_id: i for i, node_id in enumerate(node_ids)},
            layers=tuple((node_id,) for node_id in node_ids),
            fallback=True,
        )


def layout(graph: Graph, config: Optional[LayoutConfig] = None) -> Dict[str, Position]:
    """Compute node positions for `graph`. See LayoutEngine."""
    return LayoutEngine(config).compute(graph).positions


def _positions_in_layers(layers: List[List[str]]) -> Dict[str, int]:
    return {node_id: i for layer in layers for i, node_id in enumerate(layer)}


def _sort_by_barycenter(
    layer: List[str],
    neighbours: Dict[str, List[str]],
    pos: Dict[str, int],
) -> List[str]:
    keyed: List[Tuple[float, str]] = []
    for index, node_id in enumerate(layer):
        adjacent = neighbours.get(node_id)
        if adjacent:
            key = sum(pos[n] for n in adjacent) / len(adjacent)
        else:
            key = float(index)
        keyed.append((key, node_id))
    keyed.sort()
    return [node_id for _, node_id in keyed]


def _count_crossings(
    links: List[Tuple[str, str]],
    ranks: Dict[str, int],
    pos: Dict[str, int],
) -> int:
    """Count pairwise crossings between links spanning the same ranks."""
    groups: Dict[Tuple[int, int], List[Tuple[int, int]]] = defaultdict(list)
    for upper, lower in links:
        groups[(ranks[upper], ranks[lower])].append((pos[upper], pos[lower]))

    crossings = 0
    for segments in groups.values():
        for i in range(len(segments)):
            u1, l1 = segments[i]
            for j in range(i + 1, len(segments)):
                u2, l2 = segments[j]
                if (u1 - u2) * (l1 - l2) < 0:
                    crossings += 1
    return crossings
