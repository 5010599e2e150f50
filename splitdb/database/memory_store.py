"""In-memory document and snapshot stores suitable for tests and local runs."""

from __future__ import annotations

import copy
import itertools
import threading
from typing import Any, Iterator, Mapping

from splitdb.errors import StoreUnavailableError

from .store import DocumentStore, SnapshotStore


class MemoryDocumentStore(DocumentStore):
    """Insertion-ordered record storage kept in a dict."""

    def __init__(self, name: str = "dataset", *, create: bool = True) -> None:
        self.name = name
        self._records: dict[str, dict[str, Any]] | None = {} if create else None
        self._sequence = itertools.count(1)
        self._snapshots = MemorySnapshotStore()
        self._lock = threading.Lock()

    def exists(self) -> bool:
        with self._lock:
            return self._records is not None

    def recreate(self) -> None:
        with self._lock:
            self._records = {}
            self._sequence = itertools.count(1)

    def drop(self) -> None:
        with self._lock:
            self._records = None

    def count(self) -> int:
        with self._lock:
            return len(self._require())

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._require())

    def get(self, id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._require().get(str(id))
            return copy.deepcopy(record) if record is not None else None

    def put(self, record: Mapping[str, Any], id: str | None = None) -> str:
        with self._lock:
            records = self._require()
            if id is None:
                id = str(next(self._sequence))
                while id in records:
                    id = str(next(self._sequence))
            records[str(id)] = copy.deepcopy(dict(record))
            return str(id)

    def delete(self, id: str) -> None:
        with self._lock:
            self._require().pop(str(id), None)

    def aggregate_by_field(self, field: str) -> dict[Any, list[str]]:
        with self._lock:
            groups: dict[Any, list[str]] = {}
            for id, record in self._require().items():
                if field in record:
                    groups.setdefault(record[field], []).append(id)
            return groups

    def documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        with self._lock:
            items = [(id, copy.deepcopy(record)) for id, record in self._require().items()]
        return iter(items)

    def snapshots(self) -> "MemorySnapshotStore":
        return self._snapshots

    def _require(self) -> dict[str, dict[str, Any]]:
        if self._records is None:
            raise StoreUnavailableError(self.name)
        return self._records


class MemorySnapshotStore(SnapshotStore):
    """Snapshot store holding documents in process memory."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            document = self._documents.get(key)
            return copy.deepcopy(document) if document is not None else None

    def put(self, key: str, document: Mapping[str, Any]) -> None:
        with self._lock:
            self._documents[key] = copy.deepcopy(dict(document))

    def delete(self, key: str) -> None:
        with self._lock:
            self._documents.pop(key, None)
