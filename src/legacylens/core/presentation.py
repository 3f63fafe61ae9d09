"""
Presentation lookup for node kinds and scores.

Renderers look up how to draw a node here instead of dispatching on node
subclasses.
"""

from typing import Dict, NamedTuple

from .types import Node, NodeKind


class KindStyle(NamedTuple):
    badge: str
    color: str
    status_label: str
    status_value: str
    renderer_type: str


KIND_STYLES: Dict[NodeKind, KindStyle] = {
    NodeKind.FRAGILE: KindStyle(
        badge="Critical Unit",
        color="red",
        status_label="Fragility",
        status_value="{score}/10",
        renderer_type="fragileNode",
    ),
    NodeKind.STANDARD: KindStyle(
        badge="Standard Unit",
        color="green",
        status_label="Stability",
        status_value="OK",
        renderer_type="safeNode",
    ),
}

# Lower bound of each risk band, highest first
RISK_BANDS = (
    (8, "Critical"),
    (5, "Moderate"),
    (0, "Low"),
)

RISK_COLORS: Dict[str, str] = {
    "Critical": "red",
    "Moderate": "yellow",
    "Low": "green",
}


def style_for(node: Node) -> KindStyle:
    return KIND_STYLES[node.kind]


def risk_label(score: int) -> str:
    """Critical for 8 and up, Moderate for 5 to 7, Low otherwise."""
    for floor, label in RISK_BANDS:
        if score >= floor:
            return label
    return "Low"


def status_text(node: Node) -> str:
    return style_for(node).status_value.format(score=node.fragility_score)
