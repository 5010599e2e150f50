"""
Database Module
===============

Document store contracts and backends for dataset instances and their
persisted partition state.
"""

from .store import CLASS_LABEL_KEY, INSTANCE_KEY, SET_TYPE_KEY, DocumentStore, SnapshotStore
from .memory_store import MemoryDocumentStore, MemorySnapshotStore
from .database_factory import DatabaseFactory

__all__ = [
    'CLASS_LABEL_KEY',
    'INSTANCE_KEY',
    'SET_TYPE_KEY',
    'DocumentStore',
    'SnapshotStore',
    'MemoryDocumentStore',
    'MemorySnapshotStore',
    'DatabaseFactory',
]
