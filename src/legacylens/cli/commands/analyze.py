"""
Analyze Command - Map a codebase through the analysis service.

Bundles the sources under PATH, sends them to the analysis service, lays
out the returned dependency graph and saves the result as a snapshot that
`inspect` and `blast` can read.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from ...client.analysis import AnalysisClient
from ...config import Settings
from ...core.bundle import build_context
from ...core.exceptions import BundleError, LegacyLensError
from ...core.pipeline import Workspace
from ..utils import (
    DEFAULT_SNAPSHOT_PATH,
    echo_error,
    echo_info,
    echo_json_error,
    echo_json_success,
    echo_success,
    echo_warning,
    print_view,
    save_snapshot,
)

logger = logging.getLogger(__name__)


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--endpoint", default=None, help="Analysis service URL (overrides config)")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("-o", "--output", default=str(DEFAULT_SNAPSHOT_PATH), help="Where to save the snapshot")
@click.option("--json", "as_json", is_flag=True, help="Output the view as JSON")
def analyze(path: Path, endpoint: Optional[str], timeout: Optional[float], output: str, as_json: bool):
    """
    Analyze a directory or .zip archive of source code.
    """
    try:
        settings = Settings.load()
        bundle = build_context(path)
        if bundle.is_empty:
            raise BundleError(f"No readable source files found in {path}")
    except LegacyLensError as e:
        _fail(e, as_json)
        return

    if not as_json:
        echo_info(f"Bundled {len(bundle.files)} files ({bundle.size_bytes} bytes)")
        if bundle.skipped:
            echo_warning(f"Skipped {len(bundle.skipped)} large or unreadable files")

    client = AnalysisClient(
        endpoint=endpoint or settings.analysis.endpoint,
        timeout=timeout or settings.analysis.timeout,
    )
    workspace = Workspace(settings.layout, settings.viewport)

    result = workspace.analyze(bundle.context, client)
    if result.is_err():
        _fail(result.error, as_json)
        return

    view = result.unwrap()
    saved = save_snapshot(view, output)

    if as_json:
        echo_json_success(view.to_dict())
        return

    print_view(view)
    graph = view.snapshot.graph
    echo_success(f"Mapped {graph.node_count} components and {graph.edge_count} dependencies")
    echo_info(f"Snapshot saved to {saved}")


def _fail(error: Exception, as_json: bool) -> None:
    if as_json:
        echo_json_error(error)
    else:
        echo_error(str(error))
        if getattr(error, "retryable", False):
            echo_info("The previous snapshot was left untouched. Try again.")
    sys.exit(1)
