"""Unit test configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from firestore_migrator.core.config import MigrationConfig
from firestore_migrator.core.context import MigrationContext
from firestore_migrator.core.migrator import FirestoreToSupabaseMigrator
from firestore_migrator.core.phases import DEFAULT_PHASES
from firestore_migrator.services.destination import InMemoryDestination
from firestore_migrator.services.sink import WriteSink
from firestore_migrator.services.source import CollectionWalker, InMemorySource
from firestore_migrator.utils.logging import RunLogger

# Foreign keys of the destination schema that matter for write ordering
SCHEMA_FOREIGN_KEYS = {
    "messages": {"channel_id": "channels"},
    "replies": {"message_id": "messages"},
    "reactions": {"message_id": "messages"},
    "tasks": {"channel_id": "channels"},
    "cities": {"country_id": "countries"},
    "courses": {"class_id": "classes"},
    "enrollments": {
        "student_id": "students",
        "course_id": "courses",
        "class_id": "classes",
    },
    "payments": {"enrollment_id": "enrollments"},
}


def _build_destination(**kwargs: Any) -> InMemoryDestination:
    """Build an in-memory destination with the migration's schema constraints."""
    kwargs.setdefault("primary_keys", {"user_profiles": "user_id"})
    kwargs.setdefault("foreign_keys", SCHEMA_FOREIGN_KEYS)
    return InMemoryDestination(**kwargs)


def _read_messages(run_log: RunLogger) -> list[str]:
    """Flush *run_log* and return its lines with the ``[timestamp] `` prefix stripped."""
    run_log.flush()
    lines = Path(run_log.log_path).read_text(encoding="utf-8").splitlines()
    return [line.split("] ", 1)[1] for line in lines]


@pytest.fixture()
def run_log(tmp_path):
    """An open file-only RunLogger, closed after the test."""
    logger = RunLogger(tmp_path / "migration-test.log", console=False)
    yield logger
    logger.close()


@pytest.fixture()
def make_migrator(run_log):
    """Factory fixture for a migrator over in-memory source and destination.

    Usage in tests::

        def test_something(make_migrator, sample_collections):
            migrator, destination = make_migrator(sample_collections)
            summary = migrator.migrate()
    """

    def _make(
        collections: dict[str, dict[str, dict[str, Any]]],
        destination: Any = None,
        config: MigrationConfig | None = None,
        dry_run: bool = False,
        phases=DEFAULT_PHASES,
        source: Any = None,
    ) -> tuple[FirestoreToSupabaseMigrator, Any]:
        destination = destination if destination is not None else _build_destination()
        context = MigrationContext(config=config or MigrationConfig(), dry_run=dry_run)
        migrator = FirestoreToSupabaseMigrator(
            context,
            CollectionWalker(source or InMemorySource(collections)),
            WriteSink(destination, max_retries=0, retry_delay=0),
            run_log,
            phases=phases,
        )
        return migrator, destination

    return _make


@pytest.fixture()
def make_destination():
    """Factory fixture for an InMemoryDestination with the schema's foreign keys."""
    return _build_destination


@pytest.fixture()
def log_messages(run_log):
    """Callable returning the run log's messages so far, without timestamps."""
    return lambda: _read_messages(run_log)
