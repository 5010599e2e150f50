"""Reproducible train/test and cross fold splits over a document store."""

from .connection import (
    Connection,
    clear_default_connection,
    create_connection,
    get_default_connection,
    set_default_connection,
)
from .db import (
    InstanceStream,
    advance_fold,
    clear,
    current_fold,
    current_state,
    distribution,
    divide_by_folds,
    divide_by_preset,
    divide_by_ratio,
    fold_count,
    ids,
    instance_by_id,
    instance_count,
    instances,
    instances_by_class_label,
    instances_load,
    set_default_bucket,
    set_population_use,
    stats,
)
from .spec import Bucket, PartitionState, SplitStats
from .thaw import FrozenDataset, freeze_dataset

__all__ = [
    "Bucket",
    "Connection",
    "FrozenDataset",
    "InstanceStream",
    "PartitionState",
    "SplitStats",
    "advance_fold",
    "clear",
    "clear_default_connection",
    "create_connection",
    "current_fold",
    "current_state",
    "distribution",
    "divide_by_folds",
    "divide_by_preset",
    "divide_by_ratio",
    "fold_count",
    "freeze_dataset",
    "get_default_connection",
    "ids",
    "instance_by_id",
    "instance_count",
    "instances",
    "instances_by_class_label",
    "instances_load",
    "set_default_bucket",
    "set_default_connection",
    "set_population_use",
    "stats",
]
