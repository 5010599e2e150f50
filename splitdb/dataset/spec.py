"""Partition state, bucket selectors and split statistics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from splitdb.errors import UnknownBucketError

Id = str

ID_STATE_KEY = "id-state"


class Bucket(str, Enum):
    """Coarse partition label selecting ids of a split."""

    TRAIN = "train"
    TEST = "test"
    ALL = "all"

    @classmethod
    def parse(cls, value: "Bucket | str") -> "Bucket":
        if isinstance(value, Bucket):
            return value
        if value == "train_test":
            return cls.ALL
        try:
            return cls(value)
        except ValueError:
            raise UnknownBucketError(value) from None


@dataclass(frozen=True)
class PartitionState:
    """The cached and persisted train/test or fold assignment.

    Split form carries only ``train`` and ``test``.  Fold form also carries
    ``folds`` and ``current_fold``; ``train`` and ``test`` are then the
    rotation of ``folds`` at ``current_fold``.
    """

    train: tuple[Id, ...] = ()
    test: tuple[Id, ...] = ()
    folds: tuple[tuple[Id, ...], ...] | None = None
    current_fold: int = 0

    @property
    def has_folds(self) -> bool:
        return self.folds is not None

    def bucket(self, bucket: Bucket) -> tuple[Id, ...]:
        if bucket is Bucket.TRAIN:
            return self.train
        if bucket is Bucket.TEST:
            return self.test
        return self.train + self.test

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "train_test": {"train": list(self.train), "test": list(self.test)},
        }
        if self.folds is not None:
            doc["folds"] = [list(fold) for fold in self.folds]
            doc["current_fold"] = self.current_fold
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "PartitionState":
        train_test = doc.get("train_test") or {}
        folds = doc.get("folds")
        return cls(
            train=as_id_tuple(train_test.get("train", ())),
            test=as_id_tuple(train_test.get("test", ())),
            folds=None if folds is None else tuple(as_id_tuple(fold) for fold in folds),
            current_fold=int(doc.get("current_fold", 0)),
        )


@dataclass(frozen=True)
class SplitStats:
    """Training versus testing bucket sizes."""

    train: int
    test: int
    split: float

    @classmethod
    def of(cls, state: PartitionState | None) -> "SplitStats":
        if state is None:
            return cls(train=0, test=0, split=0.0)
        train = len(state.train)
        test = len(state.test)
        total = train + test
        return cls(train=train, test=test, split=0.0 if total == 0 else train / total)

    def as_dict(self) -> dict[str, Any]:
        return {"train": self.train, "test": self.test, "split": self.split}


def as_id_tuple(ids: Iterable[Any]) -> tuple[Id, ...]:
    """Normalise any id sequence into the immutable form kept in state."""

    return tuple(str(value) for value in ids)
