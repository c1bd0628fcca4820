"""
End-of-run summary logging for the Firestore to Supabase migration tool.

Kept apart from ``migrator.py`` so the orchestrator stays focused on control
flow. Header, counters and collection errors go through the run logger so
they land in the durable run log. Individual failures are already logged
there once each, so the recap list only goes to the console logger and the
YAML report.
"""

from __future__ import annotations

import logging

from firestore_migrator.types import MigrationSummary
from firestore_migrator.utils.logging import RunLogger, log_with_context

# Failures listed individually in the summary before truncating
MAX_LISTED_FAILURES = 20


def _outcome_header(summary: MigrationSummary) -> tuple[int, str]:
    if summary.cancelled:
        return logging.WARNING, "MIGRATION CANCELLED - PARTIAL RESULTS BELOW"
    if summary.dry_run:
        return logging.INFO, "DRY RUN COMPLETED"
    if summary.has_errors:
        return logging.WARNING, "MIGRATION COMPLETED WITH ERRORS"
    return logging.INFO, "MIGRATION COMPLETED SUCCESSFULLY"


def log_migration_summary(run_log: RunLogger, summary: MigrationSummary) -> None:
    """Log the outcome header, per-entity counters and any failures.

    Args:
        run_log: The open run logger.
        summary: The finished run's summary.
    """
    level, header = _outcome_header(summary)
    run_log.log("=" * 60)
    run_log.log(header, level, outcome=header.lower())
    run_log.log("=" * 60)

    duration = summary.duration_seconds
    run_log.log(f"Duration: {duration / 60:.1f} minutes ({duration:.1f} seconds)")

    for entity, stats in summary.entities.items():
        run_log.log(
            f"{entity}: {stats.inserted} inserted, {stats.skipped} skipped, "
            f"{stats.failed} failed"
        )

    for path, reason in summary.phase_errors.items():
        run_log.log(f"Collection {path} could not be read: {reason}", logging.ERROR)

    if summary.failures:
        run_log.log(f"{len(summary.failures)} record(s) failed", logging.WARNING)
        for failure in summary.failures[:MAX_LISTED_FAILURES]:
            log_with_context(
                logging.WARNING,
                f"  {failure.entity} {failure.record_id}: {failure.reason}",
            )
        remaining = len(summary.failures) - MAX_LISTED_FAILURES
        if remaining > 0:
            log_with_context(
                logging.WARNING,
                f"  ... and {remaining} more (see the migration report)",
            )
