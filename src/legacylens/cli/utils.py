"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across various CLI commands,
including formatted printing, the JSON output envelope and snapshot
loading and saving.
"""

import json
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..client.analysis import AnalysisResponse
from ..config import Settings
from ..core.exceptions import LegacyLensError, SnapshotNotFoundError
from ..core.pipeline import ViewState, Workspace
from ..core.presentation import RISK_COLORS, risk_label, status_text

DEFAULT_SNAPSHOT_PATH = Path(".legacylens/snapshot.json")

console = Console()


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def echo_json_success(data: Any) -> None:
    click.echo(json.dumps({"meta": {"status": "success"}, "data": data}))


def echo_json_error(error: Exception) -> None:
    click.echo(json.dumps({
        "meta": {"status": "error"},
        "error": {"message": str(error), "type": type(error).__name__},
    }))


def resolve_snapshot_path(snapshot_file: str) -> Path:
    """
    Resolve a file or directory argument to a snapshot file.

    A directory resolves to its .legacylens/snapshot.json.
    """
    path = Path(snapshot_file)
    if path.is_dir():
        return path / DEFAULT_SNAPSHOT_PATH
    return path


def load_snapshot(snapshot_file: str, settings: Optional[Settings] = None) -> Workspace:
    """
    Load an exported snapshot back into a Workspace.

    The file goes through the same normalization and layout as a live
    analysis result.

    Args:
        snapshot_file (str): Path to a snapshot JSON file or a directory
            containing .legacylens/snapshot.json.
        settings (Optional[Settings]): Layout and viewport settings to use.

    Returns:
        Workspace: A workspace with the snapshot applied.

    Raises:
        SnapshotNotFoundError: If no snapshot exists at the path.
        LegacyLensError: If the file cannot be parsed.
    """
    path = resolve_snapshot_path(snapshot_file)
    if not path.exists():
        raise SnapshotNotFoundError(str(path))

    try:
        data = json.loads(path.read_text())
        response = AnalysisResponse.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise LegacyLensError(f"Failed to load snapshot {path}: {e}") from e

    settings = settings or Settings()
    workspace = Workspace(settings.layout, settings.viewport)
    workspace.load(response)
    return workspace


def save_snapshot(view: ViewState, output: str) -> Path:
    """Write a view to disk as JSON, creating parent directories."""
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(view.to_dict(), indent=2))
    return path


def print_view(view: ViewState) -> None:
    """Render the summary and node table of a view."""
    snapshot = view.snapshot
    if snapshot is None:
        echo_warning("Nothing analyzed yet")
        return

    if snapshot.summary:
        console.print(f"\n[bold]Summary[/bold]\n{snapshot.summary}\n")

    table = Table(title="Components")
    table.add_column("Component", style="cyan")
    table.add_column("Kind")
    table.add_column("Status")
    table.add_column("Risk")
    table.add_column("Rank", justify="right")

    for node in snapshot.graph.nodes:
        risk = risk_label(node.fragility_score)
        table.add_row(
            node.label,
            node.kind.value,
            status_text(node),
            f"[{RISK_COLORS[risk]}]{risk}[/{RISK_COLORS[risk]}]",
            str(snapshot.layout.ranks[node.id]),
        )
    console.print(table)

    if snapshot.suggestions:
        console.print("\n[bold]Suggestions[/bold]")
        for suggestion in snapshot.suggestions:
            console.print(f"  • {suggestion}")

    if snapshot.layout.back_edges:
        echo_warning(f"Circular dependencies via: {', '.join(snapshot.layout.back_edges)}")
