"""Shared type definitions for the Firestore to Supabase migration tool.

Provides TypedDicts for the Firestore document shapes read by the pipeline
and the structured result types returned at the write boundary and at the
end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict

# ---------------------------------------------------------------------------
# Firestore document shapes (camelCase, every field optional)
# ---------------------------------------------------------------------------


class FirestoreUser(TypedDict, total=False):
    """A document from the ``users`` collection."""

    displayName: str
    email: str
    roles: list[str]
    isOnboardingComplete: bool
    createdAt: Any
    updatedAt: Any


class FirestoreChannel(TypedDict, total=False):
    """A document from the ``channels`` collection."""

    name: str
    description: str
    members: list[str]
    admins: list[str]
    createdBy: str
    createdAt: Any
    updatedAt: Any


class FirestoreMessage(TypedDict, total=False):
    """A document from ``channels/{id}/messages`` or ``.../replies``."""

    userId: str
    content: str
    createdAt: Any
    updatedAt: Any


class FirestoreReaction(TypedDict, total=False):
    """A document from ``channels/{id}/reactions``."""

    messageId: str
    userId: str
    type: str
    createdAt: Any


class FirestoreTask(TypedDict, total=False):
    """A document from ``channels/{id}/tasks``."""

    userId: str
    title: str
    description: str
    status: str
    assignedTo: list[str]
    dueDate: Any
    createdAt: Any
    updatedAt: Any


# ---------------------------------------------------------------------------
# Write results
# ---------------------------------------------------------------------------


class WriteOutcome(str, Enum):
    """Per-record outcome of a destination write.

    ``INSERTED`` covers both a fresh insert and an upsert that replaced an
    existing row.
    """

    INSERTED = "inserted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class WriteResult:
    """Structured result from the write sink.

    Three-state model: *inserted*, *skipped* (row already present) or
    *failed* with a human-readable reason.
    """

    outcome: WriteOutcome
    record_id: str
    reason: str | None = None

    @classmethod
    def inserted(cls, record_id: str) -> WriteResult:
        return cls(WriteOutcome.INSERTED, record_id)

    @classmethod
    def skipped(cls, record_id: str, reason: str = "already exists") -> WriteResult:
        return cls(WriteOutcome.SKIPPED, record_id, reason)

    @classmethod
    def failed(cls, record_id: str, reason: str) -> WriteResult:
        return cls(WriteOutcome.FAILED, record_id, reason)

    @property
    def ok(self) -> bool:
        """True unless the write failed."""
        return self.outcome is not WriteOutcome.FAILED


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


@dataclass
class RecordFailure:
    """A single record that could not be migrated."""

    entity: str
    record_id: str
    reason: str
    parent_ids: tuple[str, ...] = ()


@dataclass
class EntityStats:
    """Counters for one entity kind."""

    inserted: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        return self.inserted + self.skipped + self.failed


@dataclass
class MigrationSummary:
    """Structured summary of a migration run."""

    entities: dict[str, EntityStats] = field(default_factory=dict)
    failures: list[RecordFailure] = field(default_factory=list)
    phase_errors: dict[str, str] = field(default_factory=dict)
    started_at: str | None = None
    finished_at: str | None = None
    duration_seconds: float = 0.0
    cancelled: bool = False
    dry_run: bool = False

    def stats_for(self, entity: str) -> EntityStats:
        """Return the counters for *entity*, creating them on first use."""
        return self.entities.setdefault(entity, EntityStats())

    def record(self, entity: str, result: WriteResult) -> None:
        """Count a write result against *entity*."""
        stats = self.stats_for(entity)
        if result.outcome is WriteOutcome.INSERTED:
            stats.inserted += 1
        elif result.outcome is WriteOutcome.SKIPPED:
            stats.skipped += 1
        else:
            stats.failed += 1

    @property
    def total_failed(self) -> int:
        return sum(s.failed for s in self.entities.values())

    @property
    def has_errors(self) -> bool:
        """True when any record failed or any phase could not be read."""
        return self.total_failed > 0 or bool(self.phase_errors)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form used by the YAML report."""
        return {
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_seconds": round(self.duration_seconds, 3),
            "dry_run": self.dry_run,
            "cancelled": self.cancelled,
            "entities": {
                name: {
                    "inserted": s.inserted,
                    "skipped": s.skipped,
                    "failed": s.failed,
                }
                for name, s in self.entities.items()
            },
            "phase_errors": dict(self.phase_errors),
            "failures": [
                {
                    "entity": f.entity,
                    "id": f.record_id,
                    "reason": f.reason,
                    "parents": list(f.parent_ids),
                }
                for f in self.failures
            ],
        }
