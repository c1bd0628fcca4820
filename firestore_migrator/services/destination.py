"""Typed adapters for the relational destination.

``SupabaseDestination`` replaces raw ``client.table(t).upsert(...).execute()``
chains with three explicit calls that are easy to mock. ``DryRunDestination``
mirrors the interface but only logs, and ``InMemoryDestination`` keeps rows
in dicts while enforcing primary-key, uniqueness and foreign-key constraints
the way the real schema does.

None of the adapters add retry logic; that lives in the write sink.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, Sequence

from supabase import Client

from firestore_migrator.exceptions import DestinationError
from firestore_migrator.utils.logging import log_with_context


class Destination(Protocol):
    def upsert(
        self, table: str, record: dict[str, Any], conflict_key: str = "id"
    ) -> None: ...

    def insert(self, table: str, records: Sequence[dict[str, Any]]) -> None: ...

    def select(
        self, table: str, filters: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]: ...


class SupabaseDestination:
    """Thin typed wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def upsert(
        self, table: str, record: dict[str, Any], conflict_key: str = "id"
    ) -> None:
        """Insert *record* or replace the row matching *conflict_key*."""
        self._client.table(table).upsert(record, on_conflict=conflict_key).execute()

    def insert(self, table: str, records: Sequence[dict[str, Any]]) -> None:
        """Insert *records* in a single request."""
        self._client.table(table).insert(list(records)).execute()

    def select(
        self, table: str, filters: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Return rows of *table* whose columns equal every value in *filters*."""
        query = self._client.table(table).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return list(response.data or [])


class DryRunDestination:
    """No-op destination for dry-run mode.

    Probes always come back empty, so a dry run reports what a first run
    against an empty database would do.
    """

    def __init__(self) -> None:
        self.write_count = 0

    def upsert(
        self, table: str, record: dict[str, Any], conflict_key: str = "id"
    ) -> None:
        self.write_count += 1
        log_with_context(
            logging.DEBUG,
            f"[DRY RUN] Would upsert {table}.{conflict_key}={record.get(conflict_key)}",
        )

    def insert(self, table: str, records: Sequence[dict[str, Any]]) -> None:
        self.write_count += len(records)
        log_with_context(
            logging.DEBUG, f"[DRY RUN] Would insert {len(records)} row(s) into {table}"
        )

    def select(
        self, table: str, filters: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]:
        return []


class InMemoryDestination:
    """Dict-backed destination enforcing the schema's key constraints.

    Args:
        primary_keys: Primary-key column per table (default ``id``)
        unique_columns: Extra unique columns per table
        foreign_keys: ``{table: {column: referenced_table}}``; a non-null
            value must match a primary key already present in the
            referenced table
    """

    def __init__(
        self,
        primary_keys: Mapping[str, str] | None = None,
        unique_columns: Mapping[str, Sequence[str]] | None = None,
        foreign_keys: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self.primary_keys = dict(primary_keys or {})
        self.unique_columns = {t: list(c) for t, c in (unique_columns or {}).items()}
        self.foreign_keys = {t: dict(fk) for t, fk in (foreign_keys or {}).items()}
        self.tables: dict[str, dict[Any, dict[str, Any]]] = {}
        # Ordered (operation, table, key) tuples of every accepted write
        self.writes: list[tuple[str, str, Any]] = []

    def _pk(self, table: str) -> str:
        return self.primary_keys.get(table, "id")

    def rows(self, table: str) -> list[dict[str, Any]]:
        return list(self.tables.get(table, {}).values())

    def _check_foreign_keys(self, table: str, record: Mapping[str, Any]) -> None:
        for column, referenced in self.foreign_keys.get(table, {}).items():
            value = record.get(column)
            if value is not None and value not in self.tables.get(referenced, {}):
                raise DestinationError(
                    f'insert or update on table "{table}" violates foreign key '
                    f'constraint on "{column}": {value} not present in "{referenced}"'
                )

    def _check_unique(
        self, table: str, record: Mapping[str, Any], ignore_key: Any = None
    ) -> None:
        for column in self.unique_columns.get(table, []):
            value = record.get(column)
            for key, row in self.tables.get(table, {}).items():
                if key != ignore_key and value is not None and row.get(column) == value:
                    raise DestinationError(
                        f'duplicate key value violates unique constraint on "{table}.{column}"'
                    )

    def upsert(
        self, table: str, record: dict[str, Any], conflict_key: str = "id"
    ) -> None:
        key = record.get(conflict_key)
        if key is None:
            raise DestinationError(f'null value in column "{conflict_key}" of "{table}"')
        self._check_foreign_keys(table, record)
        self._check_unique(table, record, ignore_key=key)
        self.tables.setdefault(table, {})[key] = dict(record)
        self.writes.append(("upsert", table, key))

    def insert(self, table: str, records: Sequence[dict[str, Any]]) -> None:
        pk = self._pk(table)
        existing = self.tables.get(table, {})
        batch_keys: set[Any] = set()
        # Validate the whole batch first: a bulk insert is all-or-nothing
        for record in records:
            key = record.get(pk)
            if key is None:
                raise DestinationError(f'null value in column "{pk}" of "{table}"')
            if key in existing or key in batch_keys:
                raise DestinationError(
                    f'duplicate key value violates unique constraint "{table}_pkey"'
                )
            batch_keys.add(key)
            self._check_foreign_keys(table, record)
            self._check_unique(table, record)

        rows = self.tables.setdefault(table, {})
        for record in records:
            key = record[pk]
            rows[key] = dict(record)
            self.writes.append(("insert", table, key))

    def select(
        self, table: str, filters: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]:
        matches = [
            dict(row)
            for row in self.tables.get(table, {}).values()
            if all(row.get(column) == value for column, value in filters.items())
        ]
        return matches if limit is None else matches[:limit]
