"""Partition planning helpers.

Pure functions that turn a flat id list into a train/test split or a set of
cross validation folds.  None of them touch a document store.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from splitdb.errors import FoldRangeError, NoFoldsDefinedError

from .spec import Id, PartitionState, as_id_tuple


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return the generator used for shuffling; a seed makes it reproducible."""

    return np.random.default_rng(seed)


def shuffled(ids: Sequence[Id], rng: np.random.Generator | None = None) -> list[Id]:
    """Return a permutation of the whole sequence."""

    rng = rng if rng is not None else make_rng()
    ids = list(ids)
    return [ids[i] for i in rng.permutation(len(ids))]


def sample_universe(all_ids: Sequence[Id], ratio: float) -> list[Id]:
    """Keep the first ``floor(ratio * len(all_ids))`` ids in their given order."""

    keep = math.floor(ratio * len(all_ids))
    return list(all_ids[: max(0, keep)])


def make_folds(ids: Sequence[Id], k: int) -> list[list[Id]]:
    """Slice ids into ``k`` consecutive folds of equal size.

    Ids left over after ``k`` folds of ``floor(len(ids) / k)`` are dropped and
    empty folds are removed, so fewer than ``k`` folds come back when there
    are fewer ids than folds.
    """

    if k < 1:
        raise ValueError("fold count must be positive")
    fold_size = len(ids) // k
    folds = [list(ids[i * fold_size:(i + 1) * fold_size]) for i in range(k)]
    return [fold for fold in folds if fold]


def rotate(folds: Sequence[Sequence[Id]], current_fold: int) -> tuple[list[Id], list[Id]]:
    """Return ``(train, test)`` with the fold at ``current_fold`` held out.

    A single fold is all training data with an empty test bucket.
    """

    if not folds:
        return [], []
    if len(folds) == 1:
        return list(folds[0]), []
    train: list[Id] = []
    for idx, fold in enumerate(folds):
        if idx != current_fold:
            train.extend(fold)
    return train, list(folds[current_fold])


def fold_state(ids: Sequence[Id], k: int, current_fold: int = 0) -> PartitionState:
    """Build a fold form state positioned at ``current_fold``."""

    folds = make_folds(ids, k)
    train, test = rotate(folds, current_fold) if current_fold < len(folds) else ([], [])
    return PartitionState(
        train=as_id_tuple(train),
        test=as_id_tuple(test),
        folds=tuple(as_id_tuple(fold) for fold in folds),
        current_fold=current_fold,
    )


def advance_fold(state: PartitionState, new_fold: int) -> PartitionState:
    """Return a copy of ``state`` with ``new_fold`` as the test bucket."""

    if state.folds is None:
        raise NoFoldsDefinedError()
    if new_fold < 0 or new_fold >= len(state.folds):
        raise FoldRangeError(new_fold, len(state.folds))
    train, test = rotate(state.folds, new_fold)
    return PartitionState(
        train=as_id_tuple(train),
        test=as_id_tuple(test),
        folds=state.folds,
        current_fold=new_fold,
    )


def split(
    ids: Sequence[Id],
    ratio: float,
    *,
    shuffle: bool = False,
    rng: np.random.Generator | None = None,
) -> tuple[list[Id], list[Id]]:
    """Cut ids into ``(train, test)`` at ``round(ratio * len(ids))``.

    Ratios outside ``(0, 1)`` are not rejected: they clamp to an all test or
    all train result.
    """

    ids = shuffled(ids, rng) if shuffle else list(ids)
    cut = math.floor(ratio * len(ids) + 0.5)
    cut = min(max(cut, 0), len(ids))
    return ids[:cut], ids[cut:]
