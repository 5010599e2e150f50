"""Compute, cache and query train/test and cross fold splits of a dataset.

The unit of data is an instance: a record with a class label and an
arbitrarily nested ``instance`` payload kept in a document store.  There are
three ways to use the data:

* Take everything.  Before any divide call all ids returned by :func:`ids`
  are training data.
* Split into train and test buckets with :func:`divide_by_ratio` or
  :func:`divide_by_preset`.
* Divide into folds with :func:`divide_by_folds` and iterate them with
  :func:`advance_fold` for cross validation.

The split is kept in memory on the connection and persisted in the store's
snapshot sub-store under ``id-state``, so a new process picks up the same
split.  Every operation takes the connection first; passing ``None`` uses the
one registered with :func:`set_default_connection`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

from splitdb.database.store import CLASS_LABEL_KEY, INSTANCE_KEY, SET_TYPE_KEY, DocumentStore
from splitdb.errors import NoFoldsDefinedError, StoreUnavailableError

from . import planners
from .connection import Connection, InstanceLoader, resolve_connection
from .spec import Bucket, Id, PartitionState, SplitStats, as_id_tuple
from .stratified import even_split, group_by_label, preset_split

logger = logging.getLogger(__name__)


class InstanceStream:
    """Finite, restartable sequence of instance records.

    The ids are fixed up front so ``len()`` is known before any record is
    fetched; each iteration looks the records up in the store again.
    """

    def __init__(self, store: DocumentStore, ids: Sequence[Id], *, include_ids: bool = False) -> None:
        self._store = store
        self._ids = tuple(ids)
        self._include_ids = include_ids

    @property
    def ids(self) -> tuple[Id, ...]:
        return self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[dict[str, Any] | None]:
        for id in self._ids:
            record = self._store.get(id)
            if record is not None and self._include_ids:
                record["id"] = id
            yield record

    def __repr__(self) -> str:
        return f"InstanceStream(store={self._store.name!r}, size={len(self._ids)})"


def _require_store(conn: Connection) -> None:
    if not conn.store.exists():
        raise StoreUnavailableError(conn.name)


def _universe(conn: Connection) -> list[Id]:
    _require_store(conn)
    return planners.sample_universe(conn.store.list_ids(), conn.population_use)


def _fallback_state(conn: Connection) -> PartitionState:
    """All in scope ids as training data, used until something is divided."""

    folds = planners.make_folds(_universe(conn), 1)
    train, test = planners.rotate(folds, 0)
    return PartitionState(train=as_id_tuple(train), test=as_id_tuple(test))


def current_state(conn: Connection | None = None) -> PartitionState:
    """Return the partition state, loading or building it on first use."""

    conn = resolve_connection(conn)
    _require_store(conn)
    return conn.cache.get_or_build(lambda: _fallback_state(conn))


def _install(conn: Connection, state: PartitionState, message: str) -> SplitStats:
    conn.cache.replace(state)
    result = SplitStats.of(state)
    logger.info("%s: %s", message, result.as_dict())
    return result


def ids(conn: Connection | None = None, bucket: Bucket | str | None = None) -> list[Id]:
    """Return the ids of ``bucket`` (``train``, ``test`` or ``all``).

    ``None`` selects the connection's default bucket.  ``all`` is the train
    ids followed by the test ids, which is less than every stored id when the
    population use is below one.
    """

    conn = resolve_connection(conn)
    bucket = Bucket.parse(bucket) if bucket is not None else conn.default_bucket
    return list(current_state(conn).bucket(bucket))


def instances(
    conn: Connection | None = None,
    bucket: Bucket | str | None = None,
    *,
    include_ids: bool = False,
    id_set: Sequence[Id] | None = None,
) -> InstanceStream:
    """Return the records of ``bucket``, or of exactly ``id_set`` when given."""

    conn = resolve_connection(conn)
    selected = list(id_set) if id_set is not None else ids(conn, bucket)
    return InstanceStream(conn.store, selected, include_ids=include_ids)


def instance_by_id(conn: Connection | None, id: Id) -> dict[str, Any] | None:
    """Return the record stored under ``id``, or ``None``."""

    return resolve_connection(conn).store.get(id)


def instance_count(conn: Connection | None = None) -> int:
    """Number of stored instances, independent of the split."""

    return resolve_connection(conn).store.count()


def stats(conn: Connection | None = None) -> SplitStats:
    """Training versus testing split statistics."""

    return SplitStats.of(current_state(conn))


def divide_by_ratio(
    conn: Connection | None = None,
    ratio: float = 0.5,
    *,
    shuffle: bool = True,
    stratified: bool = False,
    seed: int | None = None,
    max_instances: int | None = None,
) -> SplitStats:
    """Divide the dataset into train and test buckets.

    Args:
        conn: Connection, or ``None`` for the default
        ratio: Fraction of the data put in the train bucket
        shuffle: Shuffle before cutting; otherwise only the boundary moves
        stratified: Cut each class label on its own so both buckets keep
            the label distribution
        seed: Seed for a reproducible shuffle
        max_instances: Cap on instances used (per label when stratified)
    """

    conn = resolve_connection(conn)
    rng = planners.make_rng(seed)
    if stratified:
        _require_store(conn)
        train, test = even_split(
            group_by_label(conn.store),
            ratio,
            shuffle=shuffle,
            rng=rng,
            population_use=conn.population_use,
            max_instances=max_instances,
        )
        message = "divided by set with even distribution by class"
    else:
        universe = _universe(conn)
        if shuffle:
            universe = planners.shuffled(universe, rng)
        if max_instances is not None:
            universe = universe[:max_instances]
        train, test = planners.split(universe, ratio)
        message = "divided by set"
    state = PartitionState(train=as_id_tuple(train), test=as_id_tuple(test))
    return _install(conn, state, message)


def divide_by_preset(conn: Connection | None = None, field: str = SET_TYPE_KEY) -> SplitStats:
    """Divide by the bucket each record was given when it was loaded."""

    conn = resolve_connection(conn)
    _require_store(conn)
    train, test = preset_split(conn.store.documents(), field)
    state = PartitionState(train=as_id_tuple(train), test=as_id_tuple(test))
    return _install(conn, state, "divided by preset")


def divide_by_folds(
    conn: Connection | None = None,
    k: int = 10,
    *,
    shuffle: bool = True,
    seed: int | None = None,
) -> SplitStats:
    """Divide the data into ``k`` folds with fold 0 as the test bucket.

    Ids that do not fill a whole fold are left out.  See :func:`advance_fold`.
    """

    conn = resolve_connection(conn)
    universe = _universe(conn)
    if shuffle:
        universe = planners.shuffled(universe, planners.make_rng(seed))
    state = planners.fold_state(universe, k)
    return _install(conn, state, f"divided into {len(state.folds)} folds")


def advance_fold(conn: Connection | None, n: int) -> SplitStats:
    """Make fold ``n`` the test bucket; requires :func:`divide_by_folds`."""

    conn = resolve_connection(conn)
    _require_store(conn)
    state = conn.cache.update(
        lambda current: planners.advance_fold(current, n),
        lambda: _fallback_state(conn),
    )
    result = SplitStats.of(state)
    logger.info("set fold %d: %s", n, result.as_dict())
    return result


def current_fold(conn: Connection | None = None) -> int:
    state = current_state(conn)
    if state.folds is None:
        raise NoFoldsDefinedError()
    return state.current_fold


def fold_count(conn: Connection | None = None) -> int:
    state = current_state(conn)
    return 0 if state.folds is None else len(state.folds)


def clear(conn: Connection | None = None, wipe_persistent: bool = False) -> None:
    """Forget the in-memory split; ``wipe_persistent`` also drops the snapshot."""

    resolve_connection(conn).cache.clear(wipe_persistent=wipe_persistent)


def set_population_use(conn: Connection | None, ratio: float) -> None:
    """Use only the first ``ratio`` of the stored ids, in ``(0, 1]``.

    This removes any persisted split, since it was computed over the old
    population.
    """

    conn = resolve_connection(conn)
    conn.population_use = ratio
    clear(conn, wipe_persistent=True)


def set_default_bucket(conn: Connection | None, bucket: Bucket | str) -> None:
    """Set the bucket used when :func:`ids` or :func:`instances` get none."""

    resolve_connection(conn).default_bucket = bucket


def distribution(conn: Connection | None = None) -> list[dict[str, Any]]:
    """Instance counts by class label."""

    conn = resolve_connection(conn)
    _require_store(conn)
    groups = group_by_label(conn.store)
    return [
        {CLASS_LABEL_KEY: label, "count": len(groups[label])}
        for label in sorted(groups, key=str)
    ]


def instances_by_class_label(
    conn: Connection | None = None,
    *,
    max_instances: int | None = None,
    ids_only: bool = False,
    seed: int | None = None,
) -> dict[Any, list[Any]]:
    """Map each class label to its ids, or records unless ``ids_only``.

    With a ``seed`` each label's instances come back in a reproducible
    random order, otherwise in store order.
    """

    conn = resolve_connection(conn)
    _require_store(conn)
    rng = planners.make_rng(seed) if seed is not None else None
    result: dict[Any, list[Any]] = {}
    for label, label_ids in group_by_label(conn.store).items():
        if rng is not None:
            label_ids = planners.shuffled(label_ids, rng)
        if max_instances is not None:
            label_ids = label_ids[:max_instances]
        result[label] = label_ids if ids_only else [conn.store.get(id) for id in label_ids]
    return result


def instances_load(
    conn: Connection | None = None,
    loader: InstanceLoader | None = None,
    *,
    recreate: bool = True,
) -> int:
    """Parse and load the dataset into the store.

    ``loader`` (default: the connection's ``create_instances_fn``) is called
    with an ``add(instance, class_label, id=None, set_type=None)`` callback.
    Records given a ``set_type`` of ``train`` or ``test`` become the current
    split right away, so :func:`divide_by_preset` need not be called after
    the first load.

    Returns:
        Number of instances added
    """

    conn = resolve_connection(conn)
    loader = loader if loader is not None else conn.create_instances_fn
    if loader is None:
        raise ValueError("no loader given and connection has no create_instances_fn")
    if recreate:
        conn.store.recreate()
        clear(conn, wipe_persistent=True)

    buckets: dict[str, list[Id]] = {Bucket.TRAIN.value: [], Bucket.TEST.value: []}
    loaded = 0

    def add(instance: Any, class_label: Any, id: Id | None = None, set_type: Bucket | str | None = None) -> Id:
        nonlocal loaded
        record = {CLASS_LABEL_KEY: class_label, INSTANCE_KEY: instance}
        if isinstance(set_type, Bucket):
            set_type = set_type.value
        if set_type is not None:
            record[SET_TYPE_KEY] = set_type
        logger.debug("loading instance (%s): %s", id, class_label)
        stored_id = conn.store.put(record, id)
        if set_type in buckets:
            buckets[set_type].append(stored_id)
        loaded += 1
        return stored_id

    logger.info("loading instances into %s", conn.name)
    loader(add)
    train, test = buckets[Bucket.TRAIN.value], buckets[Bucket.TEST.value]
    if train or test:
        state = PartitionState(train=as_id_tuple(train), test=as_id_tuple(test))
        _install(conn, state, "divided by loaded set types")
    logger.info("loaded %d instances into %s", loaded, conn.name)
    return loaded
