"""Immutable migration context.

MigrationContext is a frozen dataclass holding the configuration and run
flags for a migration run. It is created once by the CLI and shared
read-only with the migrator and the report writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from firestore_migrator.constants import RUN_TIMESTAMP_FORMAT
from firestore_migrator.core.config import MigrationConfig


@dataclass(frozen=True)
class MigrationContext:
    """Immutable context for a migration run. Created once, shared everywhere."""

    config: MigrationConfig = field(default_factory=MigrationConfig)

    # Mode flags
    dry_run: bool = False
    verbose: bool = False

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def run_stamp(self) -> str:
        """Sortable run-start stamp used in log and report file names."""
        return self.started_at.strftime(RUN_TIMESTAMP_FORMAT)

    @property
    def log_dir(self) -> Path:
        return Path(self.config.log_dir)

    @property
    def report_path(self) -> Path:
        return Path(self.config.report_dir) / f"migration_report-{self.run_stamp}.yaml"

    @property
    def log_prefix(self) -> str:
        """``"[DRY RUN] "`` in dry-run mode, otherwise empty."""
        return "[DRY RUN] " if self.dry_run else ""
