"""Class label aware splitting."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from splitdb.database.store import CLASS_LABEL_KEY, SET_TYPE_KEY, DocumentStore

from .planners import sample_universe, shuffled, split
from .spec import Id


def group_by_label(store: DocumentStore, field: str = CLASS_LABEL_KEY) -> dict[Any, list[Id]]:
    """Return every distinct ``field`` value with the ids carrying it."""

    return {label: list(ids) for label, ids in store.aggregate_by_field(field).items()}


def even_split(
    groups: Mapping[Any, Sequence[Id]],
    ratio: float,
    *,
    shuffle: bool = True,
    rng: np.random.Generator | None = None,
    population_use: float = 1.0,
    max_instances: int | None = None,
) -> tuple[list[Id], list[Id]]:
    """Split each label group on its own, then merge the buckets.

    Each group is sampled to ``population_use`` and capped at
    ``max_instances`` before being cut at ``ratio``, so every label keeps its
    proportion in both buckets.  With ``shuffle`` the merged buckets are
    shuffled again so their order does not follow the labels.
    """

    train: list[Id] = []
    test: list[Id] = []
    for ids in groups.values():
        ids = sample_universe(ids, population_use)
        if shuffle:
            ids = shuffled(ids, rng)
        if max_instances is not None:
            ids = ids[:max_instances]
        group_train, group_test = split(ids, ratio)
        train.extend(group_train)
        test.extend(group_test)
    if shuffle:
        train = shuffled(train, rng)
        test = shuffled(test, rng)
    return train, test


def preset_split(
    documents: Iterable[tuple[Id, Mapping[str, Any]]],
    field: str = SET_TYPE_KEY,
) -> tuple[list[Id], list[Id]]:
    """Bucket ids by a field assigned at load time.

    Records whose field is ``"train"`` are training data; anything else,
    including a missing field, lands in the test bucket.
    """

    train: list[Id] = []
    test: list[Id] = []
    for id, record in documents:
        (train if record.get(field) == "train" else test).append(id)
    return train, test
