"""
Write sink: idempotent writes against the destination with per-record results.

No exception escapes the sink. Every call returns a :class:`WriteResult`
(``inserted``, ``skipped`` or ``failed``), so one bad record can never abort
the rest of its collection.
"""

from __future__ import annotations

from typing import Any, Sequence

from postgrest.exceptions import APIError

from firestore_migrator.services.destination import Destination
from firestore_migrator.types import WriteResult
from firestore_migrator.utils.api import call_with_retry


def error_reason(error: BaseException) -> str:
    """Best human-readable reason for a destination error."""
    if isinstance(error, APIError) and error.message:
        return str(error.message)
    return str(error) or error.__class__.__name__


class WriteSink:
    """Performs upserts and guarded inserts against a :class:`Destination`."""

    def __init__(
        self,
        destination: Destination,
        max_retries: int = 3,
        retry_delay: float = 2,
    ) -> None:
        self.destination = destination
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def _call(self, fn, description: str) -> Any:
        return call_with_retry(
            fn,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            description=description,
        )

    def upsert(
        self, table: str, row: dict[str, Any], conflict_key: str = "id"
    ) -> WriteResult:
        """Insert *row* or fully replace the row sharing its *conflict_key*."""
        record_id = str(row.get(conflict_key))
        try:
            self._call(
                lambda: self.destination.upsert(table, row, conflict_key),
                f"upsert {table} {record_id}",
            )
        except Exception as e:
            return WriteResult.failed(record_id, error_reason(e))
        return WriteResult.inserted(record_id)

    def probe_then_insert(
        self, table: str, row: dict[str, Any], natural_key: str
    ) -> WriteResult:
        """Insert *row* unless a row with the same *natural_key* already exists.

        A probe that errors is reported as a failure rather than treated as
        "not found", so a flaky read can never produce a duplicate row.
        """
        record_id = str(row.get(natural_key))
        try:
            existing = self._call(
                lambda: self.destination.select(
                    table, {natural_key: row.get(natural_key)}, limit=1
                ),
                f"probe {table} {record_id}",
            )
        except Exception as e:
            return WriteResult.failed(record_id, f"existence probe failed: {error_reason(e)}")

        if existing:
            return WriteResult.skipped(record_id)

        try:
            self._call(
                lambda: self.destination.insert(table, [row]),
                f"insert {table} {record_id}",
            )
        except Exception as e:
            return WriteResult.failed(record_id, error_reason(e))
        return WriteResult.inserted(record_id)

    def insert_if_empty(
        self, table: str, rows: Sequence[dict[str, Any]], key: str = "id"
    ) -> list[WriteResult]:
        """Bulk-insert *rows* into an append-only table that has no rows yet.

        If the table already holds any row every record is skipped. A failed
        probe or bulk insert fails every record with the same reason.
        """
        ids = [str(row.get(key)) for row in rows]
        if not rows:
            return []
        try:
            existing = self._call(
                lambda: self.destination.select(table, {}, limit=1),
                f"probe {table}",
            )
        except Exception as e:
            reason = f"existence probe failed: {error_reason(e)}"
            return [WriteResult.failed(record_id, reason) for record_id in ids]

        if existing:
            return [
                WriteResult.skipped(record_id, "table already populated")
                for record_id in ids
            ]

        try:
            self._call(
                lambda: self.destination.insert(table, rows),
                f"insert {len(rows)} row(s) into {table}",
            )
        except Exception as e:
            reason = error_reason(e)
            return [WriteResult.failed(record_id, reason) for record_id in ids]
        return [WriteResult.inserted(record_id) for record_id in ids]
