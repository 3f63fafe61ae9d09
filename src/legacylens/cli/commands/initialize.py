"""
Init Command - Onboarding Automation.

This module handles the `legacylens init` command, which bootstraps a
project with a default configuration file and keeps the workspace
directory out of version control.
"""

from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from ...config import Settings
from ...core.bundle import build_context
from ...core.exceptions import BundleError

console = Console()


def create_gitignore(workspace_dir: Path):
    """Ensure the .legacylens/ directory is ignored by git."""
    gitignore = workspace_dir.parent / ".gitignore"
    entry = "\n# legacylens\n.legacylens/\n"

    if not gitignore.exists():
        with open(gitignore, "w") as f:
            f.write(entry)
    else:
        content = gitignore.read_text()
        if ".legacylens" not in content:
            with open(gitignore, "a") as f:
                f.write(entry)


def _init_project(root_dir: Path):
    """Internal helper to initialize a project."""
    workspace_dir = root_dir / ".legacylens"
    config_file = workspace_dir / "config.yaml"

    with console.status("[bold green]Looking for source files...[/bold green]"):
        try:
            bundle = build_context(root_dir)
        except BundleError:
            bundle = None

    if bundle is None or bundle.is_empty:
        console.print("[yellow]No readable source files found. Using defaults.[/yellow]")
    else:
        console.print(
            f"✅ Found [cyan]{len(bundle.files)}[/cyan] source files "
            f"([dim]{bundle.size_bytes} bytes[/dim])"
        )

    config = Settings().to_yaml_dict()

    workspace_dir.mkdir(exist_ok=True)
    with open(config_file, "w") as f:
        yaml.dump(config, f, sort_keys=False, default_flow_style=False)

    create_gitignore(workspace_dir)

    console.print("\n✨ [bold green]Initialized successfully![/bold green]")
    console.print(f"   Config created at: [dim]{config_file}[/dim]")


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """
    Initialize LegacyLens in the current directory.
    """
    console.print(Panel.fit("🔎 [bold blue]LegacyLens Initialization[/bold blue]", border_style="blue"))

    root_dir = Path.cwd()
    config_file = root_dir / ".legacylens" / "config.yaml"

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        if not Confirm.ask("Do you want to overwrite it?"):
            console.print("Aborted.")
            return

    _init_project(root_dir)

    console.print("\n[bold green]Ready to go! Try these commands:[/bold green]")
    console.print("1. [bold cyan]legacylens analyze .[/bold cyan]")
    console.print("2. [bold cyan]legacylens demo[/bold cyan]")
