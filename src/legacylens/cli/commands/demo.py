"""
Demo Command - Explore a sample legacy monolith without the service.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from ...client.analysis import AnalysisResponse
from ...config import Settings
from ...core.demo import DemoManager
from ...core.exceptions import ConfigError
from ...core.pipeline import Workspace
from ..utils import (
    DEFAULT_SNAPSHOT_PATH,
    echo_error,
    echo_info,
    echo_json_error,
    echo_json_success,
    echo_success,
    print_view,
    save_snapshot,
)


@click.command()
@click.option("-o", "--output", default=str(DEFAULT_SNAPSHOT_PATH), help="Where to save the snapshot")
@click.option("--json", "as_json", is_flag=True, help="Output the view as JSON")
@click.option("--scaffold", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Also write the demo Java sources into this directory")
def demo(output: str, as_json: bool, scaffold: Optional[Path]):
    """
    Load the bundled demo analysis.

    The demo maps a small Java monolith. Use --scaffold to get its sources
    and run `legacylens analyze` against them.
    """
    try:
        settings = Settings.load()
    except ConfigError as e:
        if as_json:
            echo_json_error(e)
        else:
            echo_error(str(e))
        sys.exit(1)

    manager = DemoManager(scaffold)
    workspace = Workspace(settings.layout, settings.viewport)
    workspace.load(AnalysisResponse.model_validate(manager.payload()))
    view = workspace.view()
    saved = save_snapshot(view, output)

    demo_dir = manager.provision() if scaffold is not None else None

    if as_json:
        echo_json_success(view.to_dict())
        return

    print_view(view)
    echo_success("Demo snapshot loaded")
    echo_info(f"Snapshot saved to {saved}")
    click.echo()
    click.echo("Try these commands:")
    click.echo(click.style("  legacylens inspect DB_Connection_Pool.java", fg="cyan"))
    click.echo(click.style("  legacylens blast DB_Connection_Pool.java", fg="cyan"))
    if demo_dir is not None:
        echo_info(f"Demo sources written to {demo_dir}")
        click.echo(click.style(f"  legacylens analyze {demo_dir}", fg="cyan"))
