#!/usr/bin/env python3
"""
Main execution module for the Firestore to Supabase migration tool.

Importing the subcommand modules registers them on the shared click group.
"""

from firestore_migrator.cli import config_cmd, migrate_cmd  # noqa: F401
from firestore_migrator.cli.common import cli, handle_exception  # noqa: F401


def main() -> None:
    """Main entry point for the Firestore to Supabase migration tool."""
    cli()
