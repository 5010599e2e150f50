"""
ArangoDB Document Store
=======================

Stores dataset instances as documents of one ArangoDB collection and the
persisted partition state in a sibling ``<name>_stats`` collection.

Document keys only allow a limited character set, so instance ids are
percent-encoded into keys (``a b/c`` is stored as ``a%20b%2Fc``) and decoded
on the way out.  Keys are still limited to 254 bytes.  Every document carries
an insertion sequence number so scans return ids in the order they were
added, not in ``_key`` string order.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterator, Mapping
from urllib.parse import quote, unquote

from arango.database import StandardDatabase

from splitdb.errors import StoreUnavailableError

from ..store import DocumentStore, SnapshotStore

logger = logging.getLogger(__name__)

SYSTEM_ATTRIBUTES = ("_id", "_key", "_rev")
SEQUENCE_ATTRIBUTE = "splitdb_seq"

# characters besides letters and digits ArangoDB accepts in a _key
KEY_SAFE_CHARACTERS = "_-:.@()+,=;$!*'"

IDS_QUERY = f"""
FOR doc IN @@collection
    SORT doc.{SEQUENCE_ATTRIBUTE}, doc._key
    RETURN doc._key
"""

DOCUMENTS_QUERY = f"""
FOR doc IN @@collection
    SORT doc.{SEQUENCE_ATTRIBUTE}, doc._key
    RETURN doc
"""

AGGREGATE_QUERY = f"""
FOR doc IN @@collection
    FILTER HAS(doc, @field)
    SORT doc.{SEQUENCE_ATTRIBUTE}, doc._key
    COLLECT value = doc.@field INTO keys = doc._key
    RETURN {{value: value, ids: keys}}
"""

MAX_SEQUENCE_QUERY = f"""
RETURN MAX(
    FOR doc IN @@collection
        RETURN doc.{SEQUENCE_ATTRIBUTE}
)
"""


def strip_system(document: Mapping[str, Any]) -> dict[str, Any]:
    """Drop ArangoDB bookkeeping attributes from a stored document."""

    return {
        k: v for k, v in document.items()
        if k not in SYSTEM_ATTRIBUTES and k != SEQUENCE_ATTRIBUTE
    }


def to_key(id: str) -> str:
    """Encode an instance id as a valid document key."""

    # quote() never escapes '~', which is not a legal key character
    return quote(str(id), safe=KEY_SAFE_CHARACTERS).replace("~", "%7E")


def from_key(key: str) -> str:
    return unquote(str(key))


class ArangoDocumentStore(DocumentStore):
    """Instance storage backed by a single document collection."""

    def __init__(self, db: StandardDatabase, name: str, *, batch_size: int = 1000) -> None:
        """
        Args:
            db: Connected python-arango database handle
            name: Collection holding the instances
            batch_size: Cursor batch size for full scans
        """
        self._db = db
        self.name = name
        self._batch_size = batch_size
        self._next_sequence: int | None = None
        self._sequence_lock = threading.Lock()

    def exists(self) -> bool:
        return self._db.has_collection(self.name)

    def recreate(self) -> None:
        if self._db.has_collection(self.name):
            self._db.delete_collection(self.name)
            logger.info(f"Dropped collection: {self.name}")
        self._db.create_collection(self.name)
        with self._sequence_lock:
            self._next_sequence = 1
        logger.info(f"Created document collection: {self.name}")

    def count(self) -> int:
        return self._collection().count()

    def list_ids(self) -> list[str]:
        self._collection()
        cursor = self._db.aql.execute(
            IDS_QUERY,
            bind_vars={"@collection": self.name},
            batch_size=self._batch_size,
        )
        return [from_key(key) for key in cursor]

    def get(self, id: str) -> dict[str, Any] | None:
        document = self._collection().get(to_key(id))
        return strip_system(document) if document is not None else None

    def put(self, record: Mapping[str, Any], id: str | None = None) -> str:
        collection = self._collection()
        document = dict(record)
        existing = None
        if id is not None:
            document["_key"] = to_key(id)
            existing = collection.get(document["_key"])
        if existing is not None and SEQUENCE_ATTRIBUTE in existing:
            # overwriting keeps the original position
            document[SEQUENCE_ATTRIBUTE] = existing[SEQUENCE_ATTRIBUTE]
        else:
            document[SEQUENCE_ATTRIBUTE] = self._sequence()
        result = collection.insert(document, overwrite=True)
        return from_key(result["_key"])

    def delete(self, id: str) -> None:
        self._collection().delete(to_key(id), ignore_missing=True)

    def aggregate_by_field(self, field: str) -> dict[Any, list[str]]:
        self._collection()
        cursor = self._db.aql.execute(
            AGGREGATE_QUERY,
            bind_vars={"@collection": self.name, "field": field},
            batch_size=self._batch_size,
        )
        return {row["value"]: [from_key(key) for key in row["ids"]] for row in cursor}

    def documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        self._collection()
        cursor = self._db.aql.execute(
            DOCUMENTS_QUERY,
            bind_vars={"@collection": self.name},
            batch_size=self._batch_size,
        )
        for document in cursor:
            yield from_key(document["_key"]), strip_system(document)

    def snapshots(self) -> "ArangoSnapshotStore":
        return ArangoSnapshotStore(self._db, f"{self.name}_stats")

    def _sequence(self) -> int:
        """Next insertion sequence number, continuing from the stored maximum.

        The counter lives in this process, so concurrent writers to one
        collection may interleave their numbers.
        """
        with self._sequence_lock:
            if self._next_sequence is None:
                cursor = self._db.aql.execute(
                    MAX_SEQUENCE_QUERY,
                    bind_vars={"@collection": self.name},
                )
                current = next(iter(cursor), None)
                self._next_sequence = (current or 0) + 1
            sequence = self._next_sequence
            self._next_sequence += 1
            return sequence

    def _collection(self):
        if not self._db.has_collection(self.name):
            raise StoreUnavailableError(self.name)
        return self._db.collection(self.name)


class ArangoSnapshotStore(SnapshotStore):
    """Partition state documents keyed by a fixed logical key."""

    def __init__(self, db: StandardDatabase, collection: str) -> None:
        self._db = db
        self.collection = collection

    def get(self, key: str) -> dict[str, Any] | None:
        if not self._db.has_collection(self.collection):
            return None
        document = self._db.collection(self.collection).get(key)
        return strip_system(document) if document is not None else None

    def put(self, key: str, document: Mapping[str, Any]) -> None:
        if not self._db.has_collection(self.collection):
            self._db.create_collection(self.collection)
            logger.info(f"Created document collection: {self.collection}")
        payload = dict(document)
        payload["_key"] = key
        self._db.collection(self.collection).insert(payload, overwrite=True)
        logger.debug(f"Persisted {key} to {self.collection}")

    def delete(self, key: str) -> None:
        if not self._db.has_collection(self.collection):
            return
        self._db.collection(self.collection).delete(key, ignore_missing=True)
        logger.debug(f"Deleted {key} from {self.collection}")
