"""Dataset connections and the optional process-wide default."""

from __future__ import annotations

import threading
from typing import Any, Callable

from splitdb.database.store import DocumentStore, SnapshotStore
from splitdb.errors import NotBoundError

from .cache import PartitionCache
from .spec import Bucket

InstanceAdder = Callable[..., str]
InstanceLoader = Callable[[InstanceAdder], Any]


def check_population_use(ratio: float) -> float:
    if not 0.0 < ratio <= 1.0:
        raise ValueError(f"population use must be in (0, 1], got {ratio}")
    return float(ratio)


class Connection:
    """Binds a document store to its partition state and split settings."""

    def __init__(
        self,
        store: DocumentStore,
        snapshots: SnapshotStore,
        *,
        population_use: float = 1.0,
        default_bucket: Bucket | str = Bucket.TRAIN,
        create_instances_fn: InstanceLoader | None = None,
    ) -> None:
        self.store = store
        self.snapshots = snapshots
        self.cache = PartitionCache(snapshots)
        self.create_instances_fn = create_instances_fn
        self._population_use = check_population_use(population_use)
        self._default_bucket = Bucket.parse(default_bucket)
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.store.name

    @property
    def population_use(self) -> float:
        with self._lock:
            return self._population_use

    @population_use.setter
    def population_use(self, ratio: float) -> None:
        with self._lock:
            self._population_use = check_population_use(ratio)

    @property
    def default_bucket(self) -> Bucket:
        with self._lock:
            return self._default_bucket

    @default_bucket.setter
    def default_bucket(self, bucket: Bucket | str) -> None:
        with self._lock:
            self._default_bucket = Bucket.parse(bucket)

    def __repr__(self) -> str:
        return (
            f"Connection(name={self.name!r}, population_use={self.population_use}, "
            f"default_bucket={self.default_bucket.value!r})"
        )


def create_connection(
    store: DocumentStore,
    population_use: float = 1.0,
    default_bucket: Bucket | str = Bucket.TRAIN,
    *,
    snapshots: SnapshotStore | None = None,
    create_instances_fn: InstanceLoader | None = None,
) -> Connection:
    """Create a connection; partition state goes to the store's own snapshot
    sub-store unless ``snapshots`` is given."""

    return Connection(
        store,
        snapshots if snapshots is not None else store.snapshots(),
        population_use=population_use,
        default_bucket=default_bucket,
        create_instances_fn=create_instances_fn,
    )


_default_connection: Connection | None = None
_default_lock = threading.Lock()


def set_default_connection(conn: Connection | None = None) -> None:
    """Register ``conn`` as the default; ``None`` unsets it."""

    global _default_connection
    with _default_lock:
        _default_connection = conn


def clear_default_connection() -> None:
    set_default_connection(None)


def get_default_connection() -> Connection:
    with _default_lock:
        if _default_connection is None:
            raise NotBoundError()
        return _default_connection


def resolve_connection(conn: Connection | None) -> Connection:
    """Return ``conn``, or the registered default when it is ``None``."""

    return conn if conn is not None else get_default_connection()
