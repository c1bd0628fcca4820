"""Command-line interface: the click group and its subcommands."""

__all__ = [
    "commands",
    "common",
    "config_cmd",
    "migrate_cmd",
    "report",
]
