"""
splitdb
=======

Generate, split into folds or train/test, and cache a dataset kept in a
document store.
"""

from .errors import (
    DatasetError,
    FoldRangeError,
    NoFoldsDefinedError,
    NotBoundError,
    StoreUnavailableError,
    UnknownBucketError,
)

__all__ = [
    'DatasetError',
    'FoldRangeError',
    'NoFoldsDefinedError',
    'NotBoundError',
    'StoreUnavailableError',
    'UnknownBucketError',
]

__version__ = '0.1.0'
