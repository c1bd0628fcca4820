"""
Report generation for Firestore to Supabase migration runs
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from firestore_migrator.core.context import MigrationContext
from firestore_migrator.types import MigrationSummary
from firestore_migrator.utils.logging import log_with_context


def build_report(
    context: MigrationContext,
    summary: MigrationSummary,
    log_path: Path | None = None,
) -> dict[str, Any]:
    """Assemble the report dict written by :func:`generate_report`."""
    report: dict[str, Any] = {
        "migration_summary": summary.to_dict(),
        "run": {
            "started_at": context.started_at.isoformat(),
            "dry_run": context.dry_run,
            "include_phases": list(context.config.include_phases),
            "exclude_phases": list(context.config.exclude_phases),
            "log_file": str(log_path) if log_path else None,
        },
    }
    if summary.cancelled:
        report["status"] = "cancelled"
    elif summary.has_errors:
        report["status"] = "completed_with_errors"
    else:
        report["status"] = "completed"
    return report


def generate_report(
    context: MigrationContext,
    summary: MigrationSummary,
    log_path: Path | None = None,
) -> Path:
    """Write the YAML migration report for this run and return its path."""
    report_path = context.report_path
    report_path.parent.mkdir(parents=True, exist_ok=True)

    with open(report_path, "w") as f:
        yaml.safe_dump(
            build_report(context, summary, log_path),
            f,
            default_flow_style=False,
            sort_keys=False,
        )

    log_with_context(logging.DEBUG, f"Migration report saved to {report_path}")
    return report_path
