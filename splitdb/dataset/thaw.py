"""Read-only dataset backed by a JSON lines file.

Each line of the file is one instance with the keys ``id``, ``class_label``,
``instance`` and ``set_type`` (``train`` or ``test``).  Such a file is written
by :func:`freeze_dataset` but can come from any program.  The whole file is
indexed in memory once; the split is whatever the file says, so nothing is
computed or persisted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from splitdb.database.store import CLASS_LABEL_KEY, INSTANCE_KEY, SET_TYPE_KEY

from .connection import Connection, resolve_connection
from .db import instances
from .spec import Bucket, Id, SplitStats

logger = logging.getLogger(__name__)


class FrozenDataset:
    """Instances indexed by id and by bucket."""

    def __init__(
        self,
        name: str,
        by_id: dict[Id, dict[str, Any]],
        by_bucket: dict[str, list[dict[str, Any]]],
    ) -> None:
        self.name = name
        self.by_id = by_id
        self.by_bucket = by_bucket

    @classmethod
    def load(
        cls,
        path: str | Path,
        name: str | None = None,
        *,
        set_type_key: str = SET_TYPE_KEY,
    ) -> "FrozenDataset":
        path = Path(path)
        by_id: dict[Id, dict[str, Any]] = {}
        by_bucket: dict[str, list[dict[str, Any]]] = {}
        with open(path, "r") as f:
            for line in f:
                if not line.strip():
                    continue
                row = json.loads(line)
                row["id"] = str(row["id"])
                set_type = row.pop(set_type_key, None)
                by_id[row["id"]] = row
                by_bucket.setdefault(set_type, []).append(row)
        logger.info(f"Loaded {len(by_id):,} instances from {path}")
        return cls(name or path.stem, by_id, by_bucket)

    def instance_count(self) -> int:
        return len(self.by_id)

    def ids(self, bucket: Bucket | str = Bucket.ALL) -> list[Id]:
        bucket = Bucket.parse(bucket)
        if bucket is Bucket.ALL:
            return list(self.by_id)
        return [row["id"] for row in self.by_bucket.get(bucket.value, [])]

    def instance_by_id(self, id: Id) -> dict[str, Any] | None:
        return self.by_id.get(str(id))

    def instances(
        self,
        bucket: Bucket | str = Bucket.ALL,
        *,
        id_set: Sequence[Id] | None = None,
    ) -> list[dict[str, Any] | None]:
        if id_set is not None:
            return [self.instance_by_id(id) for id in id_set]
        bucket = Bucket.parse(bucket)
        if bucket is Bucket.ALL:
            return list(self.by_id.values())
        return list(self.by_bucket.get(bucket.value, []))

    def stats(self) -> SplitStats:
        train = len(self.by_bucket.get(Bucket.TRAIN.value, []))
        test = len(self.by_bucket.get(Bucket.TEST.value, []))
        total = train + test
        return SplitStats(train=train, test=test, split=0.0 if total == 0 else train / total)


def freeze_dataset(conn: Connection | None, path: str | Path) -> int:
    """Write the current train and test buckets as a JSON lines file.

    Returns:
        Number of instances written
    """

    conn = resolve_connection(conn)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with open(path, "w") as f:
        for bucket in (Bucket.TRAIN, Bucket.TEST):
            stream = instances(conn, bucket, include_ids=True)
            for id, record in zip(stream.ids, stream):
                if record is None:
                    logger.warning(f"Instance {id} is in the {bucket.value} bucket but not in the store")
                    continue
                row = {
                    "id": id,
                    CLASS_LABEL_KEY: record.get(CLASS_LABEL_KEY),
                    INSTANCE_KEY: record.get(INSTANCE_KEY),
                    SET_TYPE_KEY: bucket.value,
                }
                f.write(json.dumps(row, default=str) + "\n")
                written += 1
    logger.info(f"Froze {written:,} instances of {conn.name} to {path}")
    return written
