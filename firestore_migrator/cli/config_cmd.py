"""CLI command handlers for config scaffolding and listing the phase plan."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from firestore_migrator.cli.common import cli
from firestore_migrator.core.config import create_default_config
from firestore_migrator.core.phases import DEFAULT_PHASES, WriteMode
from firestore_migrator.utils.logging import setup_logger

# ---------------------------------------------------------------------------
# init-config subcommand
# ---------------------------------------------------------------------------


@cli.command("init-config")
@click.argument("output", default="config.yaml", type=click.Path(dir_okay=False))
def init_config(output: str) -> None:
    """Write a default config file to OUTPUT (never overwrites)."""
    setup_logger(False)
    if not create_default_config(Path(output)):
        sys.exit(1)


# ---------------------------------------------------------------------------
# phases subcommand
# ---------------------------------------------------------------------------


@cli.command("phases")
def list_phases() -> None:
    """Print the migration plan in execution order."""
    for phase in DEFAULT_PHASES:
        group = f" [{phase.group}]" if phase.group else ""
        click.echo(f"{phase.name}{group} -> {phase.table} ({phase.write_mode.value})")
        for depth, child in _children(phase, 1):
            mode = (
                "" if child.write_mode is WriteMode.UPSERT else f" ({child.write_mode.value})"
            )
            click.echo(f"{'  ' * depth}{child.name} -> {child.table}{mode}")


def _children(phase, depth):
    for child in phase.children:
        yield depth, child
        yield from _children(child, depth + 1)
