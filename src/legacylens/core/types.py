"""
Core type definitions for LegacyLens.

Nodes and edges are frozen pydantic models: a Graph is built once per
analysis result and never mutated afterwards.
"""

from enum import StrEnum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

MIN_FRAGILITY = 0
MAX_FRAGILITY = 10

FALLBACK_NODE_ID = "root"
FALLBACK_DETAILS = "no dependencies found"


class NodeKind(StrEnum):
    """Risk classification of a module."""
    FRAGILE = "fragile"
    STANDARD = "standard"


class Node(BaseModel):
    """
    A module, file or function in the analyzed codebase.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    kind: NodeKind = NodeKind.STANDARD
    label: str
    fragility_score: int = Field(default=0, ge=MIN_FRAGILITY, le=MAX_FRAGILITY)
    details: str = ""

    @property
    def is_fragile(self) -> bool:
        return self.kind is NodeKind.FRAGILE


class Edge(BaseModel):
    """
    Directed dependency: `source` depends on `target`.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    emphasized: bool = True

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class NormalizationReport(BaseModel):
    """
    Counts of the repairs applied while normalizing a raw payload.
    """
    model_config = ConfigDict(frozen=True)

    dropped_nodes: int = 0
    duplicate_nodes: int = 0
    dangling_edges: int = 0
    duplicate_edges: int = 0
    dropped_edges: int = 0
    clamped_scores: int = 0
    unknown_kinds: int = 0
    fallback: bool = False

    @property
    def is_clean(self) -> bool:
        return not any((
            self.dropped_nodes,
            self.duplicate_nodes,
            self.dangling_edges,
            self.duplicate_edges,
            self.dropped_edges,
            self.clamped_scores,
            self.unknown_kinds,
            self.fallback,
        ))


class Graph(BaseModel):
    """
    Immutable, validated graph snapshot.

    Node order is the order nodes were accepted in, which the layout uses
    as its starting order.
    """
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    report: NormalizationReport = Field(default_factory=NormalizationReport)

    _by_id: Dict[str, Node] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._by_id = {node.id: node for node in self.nodes}

    def node(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._by_id

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def label_of(self, node_id: str) -> str:
        node = self._by_id.get(node_id)
        return node.label if node else node_id

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def is_fallback(self) -> bool:
        return self.report.fallback

    def get_stats(self) -> Dict[str, Any]:
        fragile = sum(1 for node in self.nodes if node.is_fragile)
        return {
            "total_nodes": self.node_count,
            "total_edges": self.edge_count,
            "fragile_nodes": fragile,
            "standard_nodes": self.node_count - fragile,
            "fallback": self.is_fallback,
        }
