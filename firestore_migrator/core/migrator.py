"""
Main migrator class for the Firestore to Supabase migration tool
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Mapping

from tqdm import tqdm

from firestore_migrator.core.config import should_process_phase
from firestore_migrator.core.context import MigrationContext
from firestore_migrator.core.migration_logging import log_migration_summary
from firestore_migrator.core.phases import DEFAULT_PHASES, PhaseSpec, WriteMode
from firestore_migrator.exceptions import MigrationCancelledError
from firestore_migrator.services.sink import WriteSink
from firestore_migrator.services.source import (
    CollectionWalker,
    ParentChain,
    SourceDocument,
    collection_path,
)
from firestore_migrator.types import (
    MigrationSummary,
    RecordFailure,
    WriteOutcome,
    WriteResult,
)
from firestore_migrator.utils.logging import RunLogger


class FirestoreToSupabaseMigrator:
    """Drives the phase tree: walk, transform, write and log every record.

    Execution is sequential. A parent's write outcome is always logged
    before any of its children are read, and child phases only run for
    parents whose write did not fail. Record failures are isolated to the
    record and collection read failures to the phase; neither stops the run.
    """

    def __init__(
        self,
        context: MigrationContext,
        walker: CollectionWalker,
        sink: WriteSink,
        run_log: RunLogger,
        phases: tuple[PhaseSpec, ...] = DEFAULT_PHASES,
        show_progress: bool = False,
    ) -> None:
        self.context = context
        self.walker = walker
        self.sink = sink
        self.run_log = run_log
        self.phases = phases
        self.show_progress = show_progress
        self.summary = MigrationSummary(dry_run=context.dry_run)
        self._cancel_event = threading.Event()

    # -- Cancellation ---------------------------------------------------------

    def cancel(self) -> None:
        """Request a clean stop before the next record."""
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def _check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise MigrationCancelledError("Migration cancelled by user")

    # -- Entry point ----------------------------------------------------------

    def migrate(self) -> MigrationSummary:
        """Run every selected top-level phase in order and return the summary."""
        prefix = self.context.log_prefix
        self.summary = MigrationSummary(
            dry_run=self.context.dry_run,
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        start = time.monotonic()
        self.run_log.log(f"{prefix}Starting Firestore to Supabase migration...")

        try:
            for phase in self.phases:
                self._check_cancelled()
                if not should_process_phase(phase.name, self.context.config, phase.group):
                    self.run_log.log(
                        f"Skipping {phase.name} based on configuration",
                        logging.DEBUG,
                        phase=phase.name,
                    )
                    continue
                self._run_phase(phase)
        except MigrationCancelledError as e:
            self.summary.cancelled = True
            self.run_log.log(f"{prefix}{e}", logging.WARNING)
        finally:
            self.summary.finished_at = datetime.now(timezone.utc).isoformat()
            self.summary.duration_seconds = time.monotonic() - start
            log_migration_summary(self.run_log, self.summary)

        return self.summary

    # -- Phase driver ---------------------------------------------------------

    def _run_phase(
        self,
        phase: PhaseSpec,
        chain: ParentChain = (),
        parents: Mapping[str, str] | None = None,
    ) -> None:
        """Migrate one collection, recursing into child phases per parent.

        A failure to read the collection is logged and recorded against its
        path; the caller carries on with the next phase or parent.
        """
        parents = dict(parents or {})
        label = phase.describe(parents)
        self.run_log.log(f"Starting {label} migration...", phase=phase.name)

        try:
            if phase.write_mode is WriteMode.INSERT_IF_EMPTY:
                self._run_bulk_phase(phase, chain, parents)
            else:
                docs = self.walker.walk(phase.collection, chain, phase.order_by)
                if self.show_progress and not chain:
                    docs = tqdm(docs, desc=phase.name, unit="doc")
                for doc in docs:
                    self._check_cancelled()
                    result = self._migrate_document(phase, doc, parents)
                    if result.ok and phase.children:
                        self._run_children(phase, doc, chain, parents)
        except MigrationCancelledError:
            raise
        except Exception as e:
            path = collection_path(phase.collection, chain)
            self.summary.phase_errors[path] = str(e)
            self.run_log.log(
                f"Error during {label} migration: {e}",
                logging.ERROR,
                phase=phase.name,
            )
            return

        self.run_log.log(f"{label} migration complete!", phase=phase.name)

    def _run_children(
        self,
        phase: PhaseSpec,
        doc: SourceDocument,
        chain: ParentChain,
        parents: Mapping[str, str],
    ) -> None:
        child_chain = (*chain, (phase.collection, doc.id))
        child_parents = {**parents, phase.entity: doc.id}
        for child in phase.children:
            self._check_cancelled()
            self._run_phase(child, child_chain, child_parents)

    def _run_bulk_phase(
        self, phase: PhaseSpec, chain: ParentChain, parents: Mapping[str, str]
    ) -> None:
        """Append-only collections: transform everything, then one guarded insert."""
        rows = []
        for doc in self.walker.walk(phase.collection, chain, phase.order_by):
            self._check_cancelled()
            try:
                rows.append(phase.transform(doc, parents).to_row())
            except Exception as e:
                self._record(
                    phase, WriteResult.failed(doc.id, f"transform failed: {e}"), parents
                )

        if not rows:
            self.run_log.log(f"No records found for {phase.name}. Skipping.")
            return

        for result in self.sink.insert_if_empty(phase.table, rows, phase.key):
            self._record(phase, result, parents)

    # -- Records --------------------------------------------------------------

    def _migrate_document(
        self, phase: PhaseSpec, doc: SourceDocument, parents: Mapping[str, str]
    ) -> WriteResult:
        try:
            row = phase.transform(doc, parents).to_row()
        except Exception as e:
            result = WriteResult.failed(doc.id, f"transform failed: {e}")
        else:
            if phase.write_mode is WriteMode.PROBE_THEN_INSERT:
                result = self.sink.probe_then_insert(phase.table, row, phase.key)
            else:
                result = self.sink.upsert(phase.table, row, phase.key)

        self._record(phase, result, parents)
        return result

    def _record(
        self, phase: PhaseSpec, result: WriteResult, parents: Mapping[str, str]
    ) -> None:
        """Count and log exactly one line per record outcome."""
        self.summary.record(phase.entity, result)
        prefix = self.context.log_prefix
        context = {"entity": phase.entity, "record_id": result.record_id}

        if result.outcome is WriteOutcome.INSERTED:
            self.run_log.log(
                f"{prefix}Successfully migrated {phase.entity} {result.record_id}",
                logging.INFO,
                **context,
            )
        elif result.outcome is WriteOutcome.SKIPPED:
            self.run_log.log(
                f"{prefix}{phase.entity} {result.record_id} {result.reason}, skipping...",
                logging.INFO,
                **context,
            )
        else:
            self.summary.failures.append(
                RecordFailure(
                    entity=phase.entity,
                    record_id=result.record_id,
                    reason=result.reason or "unknown error",
                    parent_ids=tuple(parents.values()),
                )
            )
            self.run_log.log(
                f"{prefix}Error migrating {phase.entity} {result.record_id}: {result.reason}",
                logging.ERROR,
                **context,
            )
