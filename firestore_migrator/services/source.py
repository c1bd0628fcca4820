"""Read side of the migration: Firestore collections as lazy document streams.

The walker performs no transformation. Adapters expose a single
``stream(path, order_by)`` method, so any document source with nested
sub-collections can stand in for Firestore.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Protocol

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from firestore_migrator.exceptions import SourceReadError
from firestore_migrator.utils.logging import log_with_context

# (collection, document id) pairs from the root down to the parent document
ParentChain = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class SourceDocument:
    """A raw source document with its native id attached."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)
    path: str = ""


class DocumentSource(Protocol):
    def stream(
        self, path: str, order_by: str | None = None
    ) -> Iterable[SourceDocument]: ...


def collection_path(collection: str, parents: ParentChain = ()) -> str:
    """Build a slash-separated collection path, e.g. ``channels/c1/messages``."""
    segments = [f"{name}/{doc_id}" for name, doc_id in parents]
    segments.append(collection)
    return "/".join(segments)


class FirestoreSource:
    """Document source backed by ``google.cloud.firestore.Client``."""

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    @staticmethod
    def _to_document(snapshot: Any) -> SourceDocument:
        return SourceDocument(
            id=snapshot.id,
            data=snapshot.to_dict() or {},
            path=snapshot.reference.path,
        )

    def stream(
        self, path: str, order_by: str | None = None
    ) -> Iterator[SourceDocument]:
        """Yield the documents of the collection at *path*.

        With *order_by*, documents carrying that field come first in
        ascending order. Firestore excludes documents lacking the field from
        ordered queries, so those are picked up afterwards in natural order;
        the same natural-order pass covers an ordered query rejected for a
        missing index.
        """
        ref = self._client.collection(path)
        if order_by is None:
            for snapshot in ref.stream():
                yield self._to_document(snapshot)
            return

        seen: set[str] = set()
        try:
            query = ref.order_by(order_by, direction=firestore.Query.ASCENDING)
            for snapshot in query.stream():
                seen.add(snapshot.id)
                yield self._to_document(snapshot)
        except (
            google_exceptions.FailedPrecondition,
            google_exceptions.InvalidArgument,
        ) as e:
            if seen:
                raise
            log_with_context(
                logging.WARNING,
                f"Ordered read of {path} by {order_by} rejected ({e}), using natural order",
                collection=path,
            )

        for snapshot in ref.stream():
            if snapshot.id not in seen:
                yield self._to_document(snapshot)


class InMemorySource:
    """Document source over plain dicts keyed by collection path.

    ``{"channels": {"c1": {...}}, "channels/c1/messages": {"m1": {...}}}``
    """

    def __init__(self, collections: Mapping[str, Mapping[str, dict[str, Any]]]):
        self._collections = collections

    def stream(
        self, path: str, order_by: str | None = None
    ) -> Iterator[SourceDocument]:
        docs = [
            SourceDocument(id=doc_id, data=dict(data), path=f"{path}/{doc_id}")
            for doc_id, data in self._collections.get(path, {}).items()
        ]
        if order_by is not None:
            with_field = [d for d in docs if d.data.get(order_by) is not None]
            without_field = [d for d in docs if d.data.get(order_by) is None]
            with_field.sort(key=lambda d: d.data[order_by])
            docs = with_field + without_field
        yield from docs


class CollectionWalker:
    """Lazy retrieval boundary over a :class:`DocumentSource`."""

    def __init__(self, source: DocumentSource) -> None:
        self._source = source

    def walk(
        self,
        collection: str,
        parents: ParentChain = (),
        order_by: str | None = None,
    ) -> Iterator[SourceDocument]:
        """Yield raw documents of *collection* nested under *parents*.

        Raises:
            SourceReadError: If the collection cannot be read.
        """
        path = collection_path(collection, parents)
        try:
            yield from self._source.stream(path, order_by)
        except SourceReadError:
            raise
        except Exception as e:
            raise SourceReadError(path, str(e)) from e
