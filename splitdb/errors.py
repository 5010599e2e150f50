"""Errors raised by the dataset split engine."""

from __future__ import annotations

from typing import Any


class DatasetError(Exception):
    """Base exception for dataset split failures."""


class NotBoundError(DatasetError):
    """Raised when no connection is given and no default is registered."""

    def __init__(self, message: str = "connection not bound: pass one or call set_default_connection()") -> None:
        super().__init__(message)


class NoFoldsDefinedError(DatasetError):
    """Raised when a fold is selected before the data was divided into folds."""

    def __init__(self, message: str = "no folds defined: call divide_by_folds() first") -> None:
        super().__init__(message)


class FoldRangeError(DatasetError):
    """Raised when the requested fold does not exist."""

    def __init__(self, fold: int, fold_count: int) -> None:
        super().__init__(f"not enough folds to set current to {fold} (have {fold_count})")
        self.fold = fold
        self.fold_count = fold_count


class UnknownBucketError(DatasetError, ValueError):
    """Raised for a bucket selector outside train, test and all."""

    def __init__(self, bucket: Any) -> None:
        super().__init__(f"no defined set type: {bucket!r}")
        self.bucket = bucket


class StoreUnavailableError(DatasetError):
    """Raised when the backing collection of a document store does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"document store {name!r} does not exist")
        self.name = name
