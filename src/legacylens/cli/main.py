"""
LegacyLens CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging

import click

from .commands import analyze, blast_radius, demo, init, inspect


@click.group()
@click.version_option(package_name="legacylens")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """LegacyLens: Dependency maps for legacy codebases.

    Sends a codebase to the analysis service and turns the answer into a
    layered dependency map with fragility scores.

    \b
    Quick Start:
      legacylens demo
      legacylens analyze ./src
      legacylens inspect DB_Connection_Pool.java
      legacylens blast DB_Connection_Pool.java
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register commands
main.add_command(init)
main.add_command(analyze.analyze)
main.add_command(demo.demo)
main.add_command(inspect.inspect)
main.add_command(blast_radius.blast_radius, name="blast")

if __name__ == "__main__":
    main()
