"""
Blast Radius Command - Calculate the impact of changing a component.
"""

import logging
import sys
from typing import Dict, List

import click
from pydantic import BaseModel, Field
from rich.table import Table

from ...analysis.blast_radius import BlastRadiusAnalyzer
from ...config import Settings
from ...core.exceptions import LegacyLensError
from ..utils import console, echo_error, echo_json_error, echo_json_success, echo_success, load_snapshot

logger = logging.getLogger(__name__)


# --- API Models ---
class ImpactedArtifact(BaseModel):
    id: str
    label: str
    distance: int
    fragility: int


class BlastRadiusResponse(BaseModel):
    source_artifact: str
    direct_dependents: List[str]
    impacted_artifacts: List[ImpactedArtifact]
    count: int
    breakdown: Dict[str, List[str]] = Field(default_factory=dict)


@click.command("blast-radius")
@click.argument("node_id")
@click.option("-i", "--input", "snapshot_file", default=".", help="Snapshot JSON file or directory")
@click.option("--max-depth", default=-1, type=int,
              help="Maximum traversal depth (-1 for unlimited)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def blast_radius(node_id: str, snapshot_file: str, max_depth: int, as_json: bool) -> None:
    """
    List every component that depends on NODE_ID, directly or transitively.
    """
    try:
        workspace = load_snapshot(snapshot_file, Settings.load())
        analyzer = BlastRadiusAnalyzer(workspace.snapshot.index)
        raw_result = analyzer.calculate(node_id, max_depth=max_depth)
        logger.debug(f"Blast radius of {node_id}: {raw_result['total_impacted_count']} impacted")
    except LegacyLensError as e:
        if as_json:
            echo_json_error(e)
        else:
            echo_error(str(e))
        sys.exit(1)

    response = BlastRadiusResponse(
        source_artifact=raw_result["source_artifact"],
        direct_dependents=raw_result["direct_dependents"],
        impacted_artifacts=raw_result["impacted_artifacts"],
        count=raw_result["total_impacted_count"],
        breakdown=raw_result["breakdown"],
    )

    if as_json:
        echo_json_success(response.model_dump())
        return

    if not response.impacted_artifacts:
        echo_success(f"Nothing depends on {node_id}")
        return

    table = Table(title=f"Blast radius of {node_id}")
    table.add_column("Component", style="cyan")
    table.add_column("Hops", justify="right")
    table.add_column("Fragility", justify="right")
    for art in response.impacted_artifacts:
        table.add_row(art.label, str(art.distance), f"{art.fragility}/10")
    console.print(table)

    summary = ", ".join(
        f"{len(ids)} {band.lower()}" for band, ids in response.breakdown.items() if ids
    )
    console.print(f"\n[bold]{response.count}[/bold] impacted ({summary})")
