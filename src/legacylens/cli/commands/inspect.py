"""
Inspect Command - Show one component and its direct relationships.
"""

import sys

import click
from rich.panel import Panel

from ...config import Settings
from ...core.exceptions import LegacyLensError, NodeNotFoundError
from ...core.presentation import RISK_COLORS, risk_label, status_text, style_for
from ..utils import console, echo_error, echo_json_error, echo_json_success, load_snapshot


@click.command()
@click.argument("node_id")
@click.option("-i", "--input", "snapshot_file", default=".", help="Snapshot JSON file or directory")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def inspect(node_id: str, snapshot_file: str, as_json: bool):
    """
    Show what NODE_ID depends on and what depends on it.
    """
    try:
        workspace = load_snapshot(snapshot_file, Settings.load())
        if not workspace.select(node_id):
            raise NodeNotFoundError(node_id)
    except LegacyLensError as e:
        if as_json:
            echo_json_error(e)
        else:
            echo_error(str(e))
        sys.exit(1)

    selected = workspace.selection.selected
    node = selected.node
    risk = risk_label(node.fragility_score)

    if as_json:
        echo_json_success({
            "id": node.id,
            "label": node.label,
            "type": node.kind.value,
            "fragilityScore": node.fragility_score,
            "risk": risk,
            "details": node.details,
            "dependencies": list(selected.dependencies),
            "dependents": list(selected.dependents),
        })
        return

    style = style_for(node)
    lines = [
        f"[bold]{style.badge}[/bold]",
        f"{style.status_label}: [{style.color}]{status_text(node)}[/{style.color}]"
        f"   Risk: [{RISK_COLORS[risk]}]{risk}[/{RISK_COLORS[risk]}]",
        "",
        node.details or "[dim]No details[/dim]",
        "",
        "[bold]Depends on[/bold]",
        *_bullets(selected.dependencies),
        "",
        "[bold]Used by[/bold]",
        *_bullets(selected.dependents),
    ]
    console.print(Panel("\n".join(lines), title=node.label, border_style=style.color))


def _bullets(labels) -> list:
    if not labels:
        return ["  [dim]none[/dim]"]
    return [f"  • {label}" for label in labels]
