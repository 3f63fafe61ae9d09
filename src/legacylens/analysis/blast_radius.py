"""
Blast Radius Analysis.

Calculates which components are affected, directly or transitively, when
one component of the analyzed codebase changes.
"""

from typing import Any, Dict, List

from ..core.exceptions import NodeNotFoundError
from ..core.index import DependencyIndex
from ..core.presentation import RISK_BANDS, risk_label


class BlastRadiusAnalyzer:
    """
    Analyzes the upstream impact of changing a node.
    """

    def __init__(self, index: DependencyIndex):
        self.index = index

    def calculate(self, node_id: str, max_depth: int = -1) -> Dict[str, Any]:
        """
        Calculate the blast radius of a single node.

        Raises:
            NodeNotFoundError: If the node is not in the snapshot.
        """
        if not self.index.has_node(node_id):
            raise NodeNotFoundError(node_id)

        impacted = self.index.transitive_dependents(node_id, max_depth)
        graph = self.index.graph

        artifacts = [
            {
                "id": impacted_id,
                "label": graph.label_of(impacted_id),
                "distance": distance,
                "fragility": graph.node(impacted_id).fragility_score,
            }
            for impacted_id, distance in impacted
        ]

        return {
            "source_artifact": node_id,
            "total_impacted_count": len(artifacts),
            "direct_dependents": self.index.dependent_ids_of(node_id),
            "impacted_artifacts": artifacts,
            "breakdown": self._categorize(artifacts),
        }

    def _categorize(self, artifacts: List[Dict[str, Any]]) -> Dict[str, List[str]]:
        """Bucket impacted ids by risk band."""
        breakdown: Dict[str, List[str]] = {label: [] for _, label in RISK_BANDS}
        for art in artifacts:
            breakdown[risk_label(art["fragility"])].append(art["id"])
        return breakdown
