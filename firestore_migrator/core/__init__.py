"""Core migration logic including configuration, the phase plan and orchestration."""

__all__ = [
    "config",
    "context",
    "migration_logging",
    "migrator",
    "phases",
]
