"""
Graph normalization.

Turns the raw node/edge lists returned by the analysis service into a
canonical Graph. Normalization never fails on bad input; it repairs:

- Scores outside [0, 10] are clamped. Non-numeric scores become 0.
- Unknown node types fall back to `standard`.
- Nodes without an id are dropped. Duplicate ids keep the first occurrence.
- Edges pointing at unknown nodes are dropped. Duplicate edge ids keep the
  first occurrence. Missing edge ids become `source-target`.
- An empty node set becomes a single fallback `root` node, so downstream
  stages never see a zero-node graph.

Every repair is counted in the graph's NormalizationReport and logged.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .types import (
    FALLBACK_DETAILS,
    FALLBACK_NODE_ID,
    MAX_FRAGILITY,
    MIN_FRAGILITY,
    Edge,
    Graph,
    Node,
    NodeKind,
    NormalizationReport,
)

logger = logging.getLogger(__name__)

# Accepted spellings of each kind, including the renderer's node type names
KIND_ALIASES: Dict[str, NodeKind] = {
    "fragile": NodeKind.FRAGILE,
    "fragilenode": NodeKind.FRAGILE,
    "standard": NodeKind.STANDARD,
    "safe": NodeKind.STANDARD,
    "safenode": NodeKind.STANDARD,
}


def normalize(
    raw_nodes: Optional[Iterable[Any]],
    raw_edges: Optional[Iterable[Any]],
) -> Graph:
    """
    Validate and normalize a raw payload into an immutable Graph.

    Args:
        raw_nodes: Node mappings in the analysis-service shape
            (`{id, type, data: {label, fragilityScore, details}}`) or with
            flat keys. None is treated as empty.
        raw_edges: Edge mappings (`{id?, source, target, animated?}`).
            None is treated as empty.

    Returns:
        Graph: The normalized snapshot with its NormalizationReport.
    """
    counts: Dict[str, int] = {
        "dropped_nodes": 0,
        "duplicate_nodes": 0,
        "dangling_edges": 0,
        "duplicate_edges": 0,
        "dropped_edges": 0,
        "clamped_scores": 0,
        "unknown_kinds": 0,
    }

    nodes: List[Node] = []
    seen_nodes: Set[str] = set()

    for raw in raw_nodes or ():
        node = _normalize_node(raw, counts)
        if node is None:
            continue
        if node.id in seen_nodes:
            counts["duplicate_nodes"] += 1
            logger.warning(f"Duplicate node id '{node.id}' ignored (first occurrence wins)")
            continue
        seen_nodes.add(node.id)
        nodes.append(node)

    fallback = not nodes
    if fallback:
        logger.info("No valid nodes in payload, using fallback root node")
        nodes = [_fallback_node()]
        seen_nodes = {FALLBACK_NODE_ID}

    edges: List[Edge] = []
    seen_edges: Set[str] = set()

    for raw in raw_edges or ():
        edge = _normalize_edge(raw, counts)
        if edge is None:
            continue
        if fallback or edge.source not in seen_nodes or edge.target not in seen_nodes:
            counts["dangling_edges"] += 1
            logger.debug(f"Dropping dangling edge {edge.source} -> {edge.target}")
            continue
        if edge.id in seen_edges:
            counts["duplicate_edges"] += 1
            logger.debug(f"Duplicate edge id '{edge.id}' ignored")
            continue
        seen_edges.add(edge.id)
        edges.append(edge)

    if counts["dangling_edges"]:
        logger.warning(f"Dropped {counts['dangling_edges']} edges referencing unknown nodes")

    report = NormalizationReport(fallback=fallback, **counts)
    if not report.is_clean:
        logger.info(f"Repaired analysis payload: {report.model_dump(exclude_defaults=True)}")
    return Graph(nodes=tuple(nodes), edges=tuple(edges), report=report)


def clamp_score(value: Any) -> int:
    """Coerce a raw fragility score into an integer within [0, 10]."""
    if isinstance(value, bool):
        return MIN_FRAGILITY
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return MIN_FRAGILITY
    if not isinstance(value, (int, float)):
        return MIN_FRAGILITY
    if isinstance(value, float):
        if math.isnan(value):
            return MIN_FRAGILITY
        if math.isinf(value):
            return MAX_FRAGILITY if value > 0 else MIN_FRAGILITY
        value = round(value)
    return max(MIN_FRAGILITY, min(MAX_FRAGILITY, int(value)))


def parse_kind(value: Any) -> Optional[NodeKind]:
    """Map a raw type string to a NodeKind, or None if unrecognized."""
    if not isinstance(value, str):
        return None
    return KIND_ALIASES.get(value.strip().lower())


def _normalize_node(raw: Any, counts: Dict[str, int]) -> Optional[Node]:
    if not isinstance(raw, Mapping):
        counts["dropped_nodes"] += 1
        return None

    node_id = _coerce_id(raw.get("id"))
    if node_id is None:
        counts["dropped_nodes"] += 1
        logger.warning(f"Dropping node without a usable id: {raw!r:.80}")
        return None

    data = raw.get("data")
    if not isinstance(data, Mapping):
        data = {}

    raw_kind = raw.get("type", raw.get("classification"))
    kind = parse_kind(raw_kind)
    if kind is None:
        kind = NodeKind.STANDARD
        counts["unknown_kinds"] += 1
        logger.debug(f"Node '{node_id}' has unknown type {raw_kind!r}, using standard")

    raw_score = _lookup(raw, data, "fragilityScore", "fragility_score")
    score = clamp_score(raw_score)
    if _is_out_of_range(raw_score):
        counts["clamped_scores"] += 1
        logger.debug(f"Node '{node_id}' score {raw_score!r} clamped to {score}")

    label = _lookup(raw, data, "label")
    if not isinstance(label, str) or not label.strip():
        label = node_id

    details = _lookup(raw, data, "details")
    if not isinstance(details, str):
        details = ""

    return Node(id=node_id, kind=kind, label=label, fragility_score=score, details=details)


def _normalize_edge(raw: Any, counts: Dict[str, int]) -> Optional[Edge]:
    if not isinstance(raw, Mapping):
        counts["dropped_edges"] += 1
        return None

    source = _coerce_id(raw.get("source", raw.get("source_id")))
    target = _coerce_id(raw.get("target", raw.get("target_id")))
    if source is None or target is None:
        counts["dangling_edges"] += 1
        return None

    edge_id = _coerce_id(raw.get("id")) or f"{source}-{target}"

    flag = raw.get("emphasized", raw.get("animated"))
    emphasized = flag is not False

    return Edge(id=edge_id, source=source, target=target, emphasized=emphasized)


def _fallback_node() -> Node:
    return Node(
        id=FALLBACK_NODE_ID,
        kind=NodeKind.STANDARD,
        label=FALLBACK_NODE_ID,
        fragility_score=MIN_FRAGILITY,
        details=FALLBACK_DETAILS,
    )


def _coerce_id(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _lookup(raw: Mapping, data: Mapping, *keys: str) -> Any:
    """Read a field from the nested `data` block first, then the top level."""
    for key in keys:
        if key in data:
            return data[key]
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _is_out_of_range(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isnan(number) or number < MIN_FRAGILITY or number > MAX_FRAGILITY
