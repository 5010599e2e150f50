"""In-memory partition state backed by a persisted snapshot."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable

from splitdb.database.store import SnapshotStore

from .spec import ID_STATE_KEY, PartitionState

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    EMPTY = "EMPTY"
    LOADING = "LOADING"
    MATERIALIZED = "MATERIALIZED"


class PartitionCache:
    """Holds the last computed partition state of one connection.

    On a miss the snapshot stored under ``id-state`` is adopted; only when
    there is none is ``build_fallback`` invoked.  Every read and mutation
    goes through one lock and states are immutable, so a reader sees either
    the old or the new state, never a partial one.
    """

    def __init__(self, snapshots: SnapshotStore, key: str = ID_STATE_KEY) -> None:
        self._snapshots = snapshots
        self._key = key
        self._state: PartitionState | None = None
        self._status = CacheState.EMPTY
        self._lock = threading.RLock()

    @property
    def status(self) -> CacheState:
        with self._lock:
            return self._status

    def peek(self) -> PartitionState | None:
        """Return the in-memory state without loading or building."""
        with self._lock:
            return self._state

    def get_or_build(self, build_fallback: Callable[[], PartitionState]) -> PartitionState:
        with self._lock:
            if self._state is not None:
                return self._state
            self._status = CacheState.LOADING
            try:
                state = self._load()
                if state is None:
                    state = build_fallback()
                    logger.debug("no persisted %s, using fallback state", self._key)
            except Exception:
                self._status = CacheState.EMPTY
                raise
            self._state = state
            self._status = CacheState.MATERIALIZED
            return state

    def replace(self, state: PartitionState) -> PartitionState:
        """Persist ``state`` and make it the current state."""
        with self._lock:
            self._persist(state)
            self._state = state
            self._status = CacheState.MATERIALIZED
            return state

    def update(
        self,
        fn: Callable[[PartitionState], PartitionState],
        build_fallback: Callable[[], PartitionState],
    ) -> PartitionState:
        """Derive, persist and install a new state from the current one."""
        with self._lock:
            current = self.get_or_build(build_fallback)
            return self.replace(fn(current))

    def clear(self, wipe_persistent: bool = False) -> None:
        with self._lock:
            self._state = None
            self._status = CacheState.EMPTY
            if wipe_persistent:
                self._snapshots.delete(self._key)
                logger.info("wiped persisted %s", self._key)

    def _load(self) -> PartitionState | None:
        document = self._snapshots.get(self._key)
        if document is None:
            return None
        logger.debug("loaded persisted %s", self._key)
        return PartitionState.from_document(document)

    def _persist(self, state: PartitionState) -> None:
        self._snapshots.put(self._key, state.to_document())
